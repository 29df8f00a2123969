"""コメント取得パイプラインで使うPydanticモデル定義."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# 辞書順で比較すると時系列順になる固定幅フォーマット
TIMESTAMP_PATTERN = r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}$"
TREE_DATE_FORMAT = "%b %d, %Y"


class ItemRef(BaseModel):
    """low/high QLの2行で構成されるアイテムの参照."""

    model_config = ConfigDict(frozen=True)

    low_id: int
    high_id: int
    ql: int
    name: str


class ItemSearchResult(BaseModel):
    """アイテム検索のヒット1件."""

    low_id: int
    high_id: int
    low_ql: int
    high_ql: int
    name: str
    exact_match_percent: int = 0

    def to_item_ref(self) -> ItemRef:
        return ItemRef(
            low_id=self.low_id,
            high_id=self.high_id,
            ql=self.high_ql,
            name=self.name,
        )


class DbItem(BaseModel):
    """IDから引いたアイテムデータベースの行."""

    low_id: int
    high_id: int
    low_ql: int
    high_ql: int
    name: str


class FlatComment(BaseModel):
    """Aunoのコメント（フラットな一覧）."""

    model_config = ConfigDict(frozen=True)

    author: str = ""
    timestamp_raw: str = Field(default="1970-01-01 00:00", pattern=TIMESTAMP_PATTERN)
    body: str = ""


class TreeComment(BaseModel):
    """AOGalaxyのスレッド形式コメント.

    ``id`` はソース内部のIDで時系列順ではない。子コメントの順序は
    ソースが返した順序のまま保持する。
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    text: str = ""  # エンティティエンコード済みのHTML
    raw_body: str = Field(alias="rawText")
    author: str
    rank_score: int = Field(alias="score")
    timestamp: date
    children: list[TreeComment] = Field(default_factory=list)
    body: str = ""  # サニタイズ後の本文

    @field_validator("timestamp", mode="before")
    @classmethod
    def parse_timestamp(cls, value: Any) -> Any:
        """``Jan 05, 2023`` 形式の日付をパース"""
        if isinstance(value, str):
            return datetime.strptime(value, TREE_DATE_FORMAT).date()
        return value


class FetchResult(BaseModel):
    """HTTPリクエスト1回分の結果."""

    url: str
    status: int | None = None
    body: bytes = b""
    error: str | None = None

    @classmethod
    def empty(cls, url: str, reason: str, status: int | None = None) -> FetchResult:
        """データなしの結果を作成"""
        return cls(url=url, status=status, error=reason)

    @property
    def is_empty(self) -> bool:
        return not self.body


class CommentReport(BaseModel):
    """1回のコマンド実行で集めたコメント全体."""

    item: ItemRef
    fetched_at: datetime
    flat_comments: list[FlatComment] = Field(default_factory=list)
    tree_comments: list[TreeComment] = Field(default_factory=list)

    @property
    def flat_count(self) -> int:
        return len(self.flat_comments)

    @property
    def tree_count(self) -> int:
        count = 0
        stack = list(self.tree_comments)
        while stack:
            node = stack.pop()
            count += 1
            stack.extend(node.children)
        return count

    @property
    def total_count(self) -> int:
        return self.flat_count + self.tree_count


# Forward reference resolution
TreeComment.model_rebuild()
