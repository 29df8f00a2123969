"""CSVファイルを使ったローカルのアイテムデータベース."""

from __future__ import annotations

from pathlib import Path

import pandas as pd
from loguru import logger

from ..models.data_models import DbItem, ItemRef, ItemSearchResult
from ..utils.markup import parse_item_reference

REQUIRED_COLUMNS = ["lowid", "highid", "lowql", "highql", "name"]


class LocalItemDatabase:
    """ローカルのアイテムデータベース"""

    def __init__(self, items: pd.DataFrame, max_results: int = 40) -> None:
        missing = [column for column in REQUIRED_COLUMNS if column not in items.columns]
        if missing:
            raise ValueError(f"Item table is missing columns: {missing}")
        self.items = items
        self.max_results = max_results

    @classmethod
    def from_csv(cls, path: str | Path, max_results: int = 40) -> LocalItemDatabase:
        """CSVファイルから読み込み"""
        items = pd.read_csv(path)
        logger.info("Loaded {} items from {}", len(items), path)
        return cls(items, max_results=max_results)

    def search(self, text: str) -> list[ItemSearchResult]:
        """名前に全ての単語を含むアイテムを検索"""
        words = text.lower().split()
        if not words:
            return []

        names = self.items["name"].str.lower()
        mask = pd.Series(True, index=self.items.index)
        for word in words:
            mask &= names.str.contains(word, regex=False)

        results = [
            ItemSearchResult(
                low_id=int(row.lowid),
                high_id=int(row.highid),
                low_ql=int(row.lowql),
                high_ql=int(row.highql),
                name=str(row.name),
                exact_match_percent=self._exact_match_percent(words, str(row.name)),
            )
            for row in self.items[mask].itertuples(index=False)
        ]
        results.sort(key=lambda result: (-result.exact_match_percent, result.name))
        return results[: self.max_results]

    @staticmethod
    def _exact_match_percent(words: list[str], name: str) -> int:
        """アイテム名の単語のうち検索語と完全一致する割合"""
        name_words = name.lower().split()
        if not name_words:
            return 0
        query = set(words)
        matched = sum(1 for word in name_words if word in query)
        return int(100 * matched / len(name_words))

    def parse_direct_reference(self, text: str) -> ItemRef | None:
        return parse_item_reference(text)

    def resolve_by_id(self, item_id: int) -> DbItem | None:
        """low/highどちらかのIDでアイテムを取得"""
        rows = self.items[
            (self.items["lowid"] == item_id) | (self.items["highid"] == item_id)
        ]
        if rows.empty:
            return None
        row = rows.iloc[0]
        return DbItem(
            low_id=int(row["lowid"]),
            high_id=int(row["highid"]),
            low_ql=int(row["lowql"]),
            high_ql=int(row["highql"]),
            name=str(row["name"]),
        )
