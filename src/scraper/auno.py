"""Auno（HTMLページ）のコメントスクレイパー."""

from __future__ import annotations

import re
from typing import Any

from loguru import logger

from ..models.data_models import FlatComment
from ..models.errors import ParseFailure
from ..utils.config import config
from ..utils.sanitizer import TextSanitizer
from .base import BaseScraper

# コメント欄を囲むマーカー。どちらかが無ければページ形式が変わったとみなす
REGION_START = "<legend>Comments</legend>"
REGION_END = "</table>"

COMMENT_PATTERN = re.compile(
    r"<tr[^>]*>\s*<td[^>]*>\s*<b>(?P<author>[^<]+?)</b>\s*"
    r"<span[^>]*>\s*(?P<time>\d{4}-\d{2}-\d{2} \d{2}:\d{2})\s*</span>\s*</td>\s*</tr>\s*"
    r"<tr[^>]*>\s*<td[^>]*>(?P<comment>.*?)</td>\s*</tr>",
    re.DOTALL,
)


class AunoScraper(BaseScraper[FlatComment]):
    """Auno用スクレイパー"""

    def __init__(
        self,
        sanitizer: TextSanitizer,
        url_template: str | None = None,
        http_config: dict[str, Any] | None = None,
    ) -> None:
        if url_template is None:
            url_template = str(
                config.get_source_config("auno").get(
                    "url", "https://auno.org/ao/db.php?id={item_id}"
                )
            )
        super().__init__("auno", url_template, http_config)
        self.sanitizer = sanitizer

    def parse(self, payload: bytes) -> list[FlatComment]:
        return self.parse_page(payload.decode("utf-8", errors="replace"))

    def parse_page(self, page: str) -> list[FlatComment]:
        """ページのコメント欄からコメント一覧を抽出（文書順）"""
        start = page.find(REGION_START)
        if start < 0:
            raise ParseFailure(f"Marker {REGION_START!r} not found")
        end = page.find(REGION_END, start)
        if end < 0:
            raise ParseFailure(f"Marker {REGION_END!r} not found after comments legend")

        region = page[start + len(REGION_START) : end]
        comments = [
            FlatComment(
                author=match.group("author").strip(),
                timestamp_raw=match.group("time"),
                body=self.sanitizer.clean_legacy(match.group("comment")),
            )
            for match in COMMENT_PATTERN.finditer(region)
        ]
        if not comments:
            logger.debug("Comment region present but no comments matched")
        return comments
