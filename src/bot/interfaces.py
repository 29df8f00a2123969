"""コマンドが利用する外部コンポーネントのインターフェース."""

from __future__ import annotations

from typing import Protocol

from ..models.data_models import DbItem, ItemRef, ItemSearchResult


class ItemResolver(Protocol):
    """アイテムデータベース"""

    max_results: int

    def search(self, text: str) -> list[ItemSearchResult]: ...

    def parse_direct_reference(self, text: str) -> ItemRef | None: ...

    def resolve_by_id(self, item_id: int) -> DbItem | None: ...


class ReplyChannel(Protocol):
    """返信先"""

    def reply(self, text: str) -> None: ...

    def make_blob(self, title: str, body: str, tooltip: str | None = None) -> str: ...

    def make_chat_link(self, label: str, command: str) -> str: ...

    def make_item_link(self, low_id: int, high_id: int, ql: int, name: str) -> str: ...
