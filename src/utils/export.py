"""データエクスポート用ユーティリティ."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any

import pandas as pd
from loguru import logger

from ..models.data_models import CommentReport, TreeComment


class DataExporter:
    """データエクスポート用クラス"""

    def __init__(self, include_raw_text: bool = False) -> None:
        self.include_raw_text = include_raw_text

    def _tree_to_dict(self, comment: TreeComment) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": comment.id,
            "author": comment.author,
            "timestamp": comment.timestamp.isoformat(),
            "score": comment.rank_score,
            "body": comment.body,
            "children": [self._tree_to_dict(child) for child in comment.children],
        }
        if self.include_raw_text:
            data["raw_text"] = comment.raw_body
        return data

    def export_to_json(self, report: CommentReport, output_path: str | Path) -> bool:
        """JSONファイルにエクスポート"""
        try:
            output_path = Path(output_path)

            export_data: dict[str, Any] = {
                "exported_at": datetime.now().isoformat(),
                "fetched_at": report.fetched_at.isoformat(),
                "item": report.item.model_dump(),
                "total_count": report.total_count,
                "sources": {
                    "auno": [
                        {
                            "author": comment.author,
                            "timestamp": comment.timestamp_raw,
                            "body": comment.body,
                        }
                        for comment in report.flat_comments
                    ],
                    "aogalaxy": [
                        self._tree_to_dict(comment) for comment in report.tree_comments
                    ],
                },
            }

            with open(output_path, "w", encoding="utf-8") as f:
                json.dump(export_data, f, ensure_ascii=False, indent=2)

            logger.info(f"Data exported to JSON: {output_path}")
            return True

        except Exception as e:
            logger.error(f"Error exporting to JSON: {e}")
            return False

    def flatten(self, report: CommentReport) -> list[dict[str, Any]]:
        """全コメントを1行1コメントに平坦化（ツリーは行きがけ順）"""
        rows: list[dict[str, Any]] = []
        sequence = 0

        def add_tree(comments: list[TreeComment], depth: int, parent_id: int | None) -> None:
            nonlocal sequence
            for comment in comments:
                sequence += 1
                rows.append(
                    {
                        "source": "aogalaxy",
                        "sequence": sequence,
                        "depth": depth,
                        "comment_id": comment.id,
                        "parent_id": parent_id,
                        "author": comment.author,
                        "timestamp": comment.timestamp.isoformat(),
                        "score": comment.rank_score,
                        "body": comment.body,
                    }
                )
                add_tree(comment.children, depth + 1, comment.id)

        add_tree(report.tree_comments, 0, None)

        for number, comment in enumerate(report.flat_comments, 1):
            rows.append(
                {
                    "source": "auno",
                    "sequence": number,
                    "depth": 0,
                    "comment_id": None,
                    "parent_id": None,
                    "author": comment.author,
                    "timestamp": comment.timestamp_raw,
                    "score": None,
                    "body": comment.body,
                }
            )

        for row in rows:
            row["item_low_id"] = report.item.low_id
            row["item_high_id"] = report.item.high_id
            row["item_name"] = report.item.name
        return rows

    def export_to_csv(self, report: CommentReport, output_path: str | Path) -> bool:
        """CSVファイルにエクスポート"""
        try:
            output_path = Path(output_path)

            df = pd.DataFrame(self.flatten(report))
            df.to_csv(output_path, index=False, encoding="utf-8")

            logger.info(f"Data exported to CSV: {output_path}")
            return True

        except Exception as e:
            logger.error(f"Error exporting to CSV: {e}")
            return False
