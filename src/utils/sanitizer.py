"""コメント本文のHTMLをボット用マークアップに変換するサニタイザー."""

from __future__ import annotations

import html
import re
import warnings
from collections.abc import Callable

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning

from ..models.data_models import DbItem
from . import markup

ItemLookup = Callable[[int], DbItem | None]
ItemLinkBuilder = Callable[[int, int, int, str], str]

BR_PATTERN = re.compile(r"<br\s*/?>", re.IGNORECASE)
NEWLINE_SPACE_PATTERN = re.compile(r"\s*\n\s*")
ANCHOR_PATTERN = re.compile(
    r"""<a\s+href=(['"])(?P<href>https?://.+?)\1[^>]*>.*?</a>""",
    re.DOTALL | re.IGNORECASE,
)
ITEM_URL_PATTERN = re.compile(
    r"https?://(?:(?:www\.)?auno\.org/ao/db\.php\?id="
    r"|(?:www\.)?aogalaxy\.com/_items/item\.php\?aoid=)"
    r"(?P<id>\d+)(?:&(?:amp;)?ql=(?P<ql>\d+))?",
)
WAYPOINT_PATTERN = re.compile(r"/waypoint\s*(\d+)\s+(\d+)\s+(\d+)")
URL_PATTERN = re.compile(r"""(https?://[^'"\s<>]+)""")

class TextSanitizer:
    """コメント本文のサニタイザー

    アイテムIDの解決はコンストラクタで受け取った関数に委譲する。
    どの変換も失敗せず、パターンに一致しない部分はそのまま残す。
    """

    def __init__(
        self,
        resolve_item: ItemLookup,
        make_item_link: ItemLinkBuilder = markup.make_item_link,
    ) -> None:
        self.resolve_item = resolve_item
        self.make_item_link = make_item_link

    def clean(self, raw_html: str) -> str:
        """AOGalaxyのリッチなHTML本文を変換"""
        text = BR_PATTERN.sub("", raw_html)
        text = self.collapse_anchors(text)
        text = self.strip_tags(text)
        return self.rewrite_links(text)

    def clean_legacy(self, raw_html: str) -> str:
        """Aunoの本文を変換（タグは全て除去）"""
        text = NEWLINE_SPACE_PATTERN.sub("", raw_html)
        text = BR_PATTERN.sub("\n", text)
        text = self.collapse_anchors(text)
        text = self.strip_tags(text).strip()
        return self.rewrite_links(text)

    def rewrite_links(self, text: str) -> str:
        text = self.rewrite_item_links(text)
        text = self.rewrite_waypoints(text)
        return self.rewrite_urls(text)

    @staticmethod
    def collapse_anchors(text: str) -> str:
        """絶対URLのアンカータグをhrefのテキストに置き換え"""
        return ANCHOR_PATTERN.sub(lambda m: m.group("href"), text)

    @staticmethod
    def strip_tags(text: str) -> str:
        """残ったタグを除去し、マークアップとして安全な文字列にする"""
        if "<" not in text and "&" not in text and ">" not in text:
            return text
        # URLだけの本文に対するbs4の警告を抑止
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", MarkupResemblesLocatorWarning)
            plain = BeautifulSoup(text, "html.parser").get_text()
        return html.escape(plain, quote=False)

    def rewrite_item_links(self, text: str) -> str:
        """アイテムデータベースのURLをアイテムリンクに置き換え"""

        def replace(match: re.Match[str]) -> str:
            item = self.resolve_item(int(match.group("id")))
            if item is None:
                return match.group(0)
            ql = int(match.group("ql")) if match.group("ql") else item.low_ql
            return self.make_item_link(item.low_id, item.high_id, ql, item.name)

        return ITEM_URL_PATTERN.sub(replace, text)

    @staticmethod
    def rewrite_waypoints(text: str) -> str:
        """``/waypoint X Y Z`` をクリック可能なコマンドに置き換え"""
        return WAYPOINT_PATTERN.sub(
            lambda m: markup.make_chat_link(
                f"/waypoint {m.group(1)} {m.group(2)} {m.group(3)}",
                f"/waypoint {m.group(1)} {m.group(2)} {m.group(3)}",
            ),
            text,
        )

    @staticmethod
    def rewrite_urls(text: str) -> str:
        """残った絶対URLをブラウザで開くリンクに置き換え"""
        return URL_PATTERN.sub(
            lambda m: markup.make_chat_link(m.group(1), f"/start {m.group(1)}"),
            text,
        )
