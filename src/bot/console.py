"""ターミナルに返信を表示する返信先."""

from __future__ import annotations

import re

import typer

from ..utils import markup

BLOB_PATTERN = re.compile(r'<a href="text://(?P<content>.*?)">(?P<title>[^<]*)</a>', re.DOTALL)


class ConsoleReplyChannel:
    """ターミナル用の返信先

    ブロブは ``<pagebreak>`` で分割したページとして展開して表示する。
    """

    def __init__(self, page_length: int = markup.MAX_PAGE_LENGTH) -> None:
        self.page_length = page_length
        self.replies: list[str] = []

    def reply(self, text: str) -> None:
        self.replies.append(text)
        typer.echo(self.expand_blobs(text))

    def make_blob(self, title: str, body: str, tooltip: str | None = None) -> str:
        return markup.make_blob(title, body, tooltip)

    def make_chat_link(self, label: str, command: str) -> str:
        return markup.make_chat_link(label, command)

    def make_item_link(self, low_id: int, high_id: int, ql: int, name: str) -> str:
        return markup.make_item_link(low_id, high_id, ql, name)

    def expand_blobs(self, text: str) -> str:
        """ブロブのリンクをページごとの本文に展開"""

        def expand(match: re.Match[str]) -> str:
            content = match.group("content").replace("&quot;", '"')
            pages = markup.paginate(content, self.page_length)
            rendered = [
                f"--- {match.group('title')} (page {number}/{len(pages)}) ---\n{page}"
                for number, page in enumerate(pages, 1)
            ]
            return "\n".join(rendered) + "\n---"

        return BLOB_PATTERN.sub(expand, text)
