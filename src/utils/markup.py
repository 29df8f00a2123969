"""チャットボット用の限定マークアップ生成ユーティリティ."""

from __future__ import annotations

import re

from ..models.data_models import ItemRef

PAGE_BREAK = "<pagebreak>"
MAX_PAGE_LENGTH = 7500

ITEM_REFERENCE_PATTERN = re.compile(
    r"""^\s*<a href=(["'])itemref://(?P<low>\d+)/(?P<high>\d+)/(?P<ql>\d+)\1>"""
    r"""(?P<name>.+?)</a>\s*$""",
    re.DOTALL,
)


def make_item_link(low_id: int, high_id: int, ql: int, name: str) -> str:
    """ゲーム内アイテムリンクを作成"""
    return f'<a href="itemref://{low_id}/{high_id}/{ql}">{name}</a>'


def make_chat_link(label: str, command: str) -> str:
    """クリックでコマンドを実行するリンクを作成"""
    return f"<a href='chatcmd://{command}'>{label}</a>"


def make_blob(title: str, body: str, tooltip: str | None = None) -> str:
    """折りたたみ可能なテキストブロブのリンクを作成"""
    header = f"<header>{tooltip or title}<end>\n\n"
    content = (header + body).replace('"', "&quot;")
    return f'<a href="text://{content}">{title}</a>'


def parse_item_reference(text: str) -> ItemRef | None:
    """チャットに貼られたアイテムリンクをItemRefに変換"""
    match = ITEM_REFERENCE_PATTERN.match(text)
    if match is None:
        return None
    return ItemRef(
        low_id=int(match.group("low")),
        high_id=int(match.group("high")),
        ql=int(match.group("ql")),
        name=match.group("name"),
    )


def paginate(body: str, max_length: int = MAX_PAGE_LENGTH) -> list[str]:
    """``<pagebreak>`` の位置でページに分割

    1区間だけで上限を超える場合は、その区間を単独のページにする。
    """
    pages: list[str] = []
    current = ""
    for chunk in body.split(PAGE_BREAK):
        if current and len(current) + len(chunk) > max_length:
            pages.append(current)
            current = ""
        current += chunk
    if current:
        pages.append(current)
    return pages
