"""AOGalaxy（JSON API）のコメントスクレイパー."""

from __future__ import annotations

import json
from typing import Any

from pydantic import TypeAdapter, ValidationError

from ..models.data_models import TreeComment
from ..models.errors import ParseFailure
from ..utils.config import config
from ..utils.sanitizer import TextSanitizer
from .base import BaseScraper

DEFAULT_MAX_DEPTH = 32

_comment_list_adapter = TypeAdapter(list[TreeComment])


def _json_depth(value: Any) -> int:
    """JSON値のネストの深さ（再帰を使わずに計算）"""
    depth = 0
    stack: list[tuple[Any, int]] = [(value, 1)]
    while stack:
        current, level = stack.pop()
        if isinstance(current, dict):
            depth = max(depth, level)
            stack.extend((child, level + 1) for child in current.values())
        elif isinstance(current, list):
            depth = max(depth, level)
            stack.extend((child, level + 1) for child in current)
    return depth


class AOGalaxyScraper(BaseScraper[TreeComment]):
    """AOGalaxy用スクレイパー"""

    def __init__(
        self,
        sanitizer: TextSanitizer,
        url_template: str | None = None,
        http_config: dict[str, Any] | None = None,
        max_depth: int | None = None,
    ) -> None:
        source_config = config.get_source_config("aogalaxy")
        if url_template is None:
            url_template = str(
                source_config.get(
                    "url",
                    "https://www.aogalaxy.com/_items/get_item_comments.php"
                    "?itemAOID={item_id}",
                )
            )
        super().__init__("aogalaxy", url_template, http_config)
        self.sanitizer = sanitizer
        if max_depth is None:
            max_depth = int(source_config.get("max_depth", DEFAULT_MAX_DEPTH))
        self.max_depth = max_depth

    def parse(self, payload: bytes) -> list[TreeComment]:
        return self.clean_tree(self.hydrate(payload))

    def hydrate(self, payload: bytes) -> list[TreeComment]:
        """JSONをコメントツリーに変換

        どこか1か所でも形式が合わなければツリー全体を破棄する。
        """
        try:
            data = json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ParseFailure(f"Invalid JSON: {e}") from e
        except RecursionError as e:
            # 深さ判定より先にデコーダの再帰上限に達した場合
            raise ParseFailure("JSON nested too deeply to decode") from e

        if not isinstance(data, list):
            raise ParseFailure(f"Expected a JSON array, got {type(data).__name__}")

        # コメント1階層は配列+オブジェクトの2段
        depth = _json_depth(data)
        if depth > self.max_depth * 2 + 1:
            raise ParseFailure(f"Comment tree nested deeper than {self.max_depth} levels")

        try:
            return _comment_list_adapter.validate_python(data)
        except ValidationError as e:
            raise ParseFailure(f"Comment tree does not match schema: {e}") from e

    def clean_tree(self, comments: list[TreeComment]) -> list[TreeComment]:
        """各コメントの本文をサニタイズ（子の順序は変えない）"""
        return [
            comment.model_copy(
                update={
                    "body": self.sanitizer.clean(comment.raw_body),
                    "children": self.clean_tree(comment.children),
                }
            )
            for comment in comments
        ]
