"""コメント一覧のマージと表示用テキストへの変換."""

from __future__ import annotations

import html
from itertools import chain

from ..models.data_models import FlatComment, TreeComment
from .markup import PAGE_BREAK

INDENT = "<tab>"
ENTRY_SEPARATOR = "\n\n" + PAGE_BREAK


def merge_comments(*comment_lists: list[FlatComment]) -> list[FlatComment]:
    """複数のフラットなコメント一覧を時系列順にマージ

    タイムスタンプは固定幅なので文字列比較で時系列順になる。
    ``sorted`` は安定ソートなので同時刻のコメントは入力順を保つ。
    重複の除去は行わない。
    """
    return sorted(chain.from_iterable(comment_lists), key=lambda c: c.timestamp_raw)


def _indent_body(body: str, indent: str) -> str:
    return indent + f"\n{indent}".join(line.strip() for line in body.split("\n"))


def render_tree(comments: list[TreeComment]) -> tuple[str, int]:
    """コメントツリーを深さ優先（行きがけ順）で表示用テキストに変換

    連番はフォレスト全体で共通のカウンタを使う。戻り値は
    (テキスト, 訪問したノード数)。
    """
    counter = 0

    def render_node(comment: TreeComment, level: int) -> str:
        nonlocal counter
        counter += 1
        indent = INDENT * level
        # 投稿者名はJSONのまま届くのでエスケープする
        author = html.escape(comment.author, quote=False)
        text = (
            f"{indent}{counter:02d} - <highlight>{comment.timestamp:%Y-%m-%d}<end>"
            f" - <orange>{author}<end>\n"
            f"{_indent_body(comment.body, indent)}"
        )
        for child in comment.children:
            text += ENTRY_SEPARATOR + render_node(child, level + 1)
        return text

    blocks = [render_node(comment, 0) for comment in comments]
    return ENTRY_SEPARATOR.join(blocks), counter


def render_flat(comments: list[FlatComment]) -> str:
    """フラットなコメント一覧を表示用テキストに変換"""
    return ENTRY_SEPARATOR.join(
        f"<highlight>{comment.author}<end> <grey>[{comment.timestamp_raw}]<end>\n"
        f"<i>{comment.body}</i>"
        for comment in comments
    )
