"""コメント取得で使う例外."""

from __future__ import annotations

from .data_models import ItemSearchResult


class CommentLookupError(Exception):
    """コメント取得処理の基底例外"""


class NetworkFailure(CommentLookupError):
    """通信エラー、タイムアウト、2xx以外のステータス、空レスポンス"""


class ParseFailure(CommentLookupError):
    """HTMLの想定領域が見つからない、またはJSONのデコードに失敗"""


class NotFound(CommentLookupError):
    """検索結果が0件"""

    def __init__(self, search: str) -> None:
        super().__init__(f"No items found matching {search!r}")
        self.search = search


class AmbiguousInput(CommentLookupError):
    """検索結果が複数あり、完全一致が1件に絞れない"""

    def __init__(self, search: str, choices: list[ItemSearchResult]) -> None:
        super().__init__(f"{len(choices)} items match {search!r}")
        self.search = search
        self.choices = choices
