"""アイテムのコメントを表示するチャットコマンド."""

from __future__ import annotations

from loguru import logger

from ..models.data_models import CommentReport, ItemRef, ItemSearchResult
from ..models.errors import AmbiguousInput, NotFound
from ..scraper.manager import CommentManager
from ..utils.render import ENTRY_SEPARATOR, render_flat, render_tree
from .interfaces import ItemResolver, ReplyChannel

COMMAND_NAME = "comments"


class CommentsCommand:
    """``comments <アイテム名|アイテムリンク>`` コマンド"""

    def __init__(
        self,
        resolver: ItemResolver,
        channel: ReplyChannel,
        manager: CommentManager | None = None,
    ) -> None:
        self.resolver = resolver
        self.channel = channel
        self.manager = manager or CommentManager(resolver.resolve_by_id)

    def get_item(self, search: str) -> ItemRef:
        """アイテムリンクまたは検索語からアイテムを特定"""
        item = self.resolver.parse_direct_reference(search)
        if item is not None:
            return item
        return self.get_item_from_search(search)

    def get_item_from_search(self, search: str) -> ItemRef:
        """検索語からアイテムを特定

        候補が複数あり完全一致が1件に絞れない場合は ``AmbiguousInput``。
        """
        findings: list[ItemSearchResult] = []
        seen: set[tuple[int, int]] = set()
        for result in self.resolver.search(search):
            key = (result.low_id, result.high_id)
            if key in seen:
                continue
            seen.add(key)
            findings.append(result)

        if not findings:
            raise NotFound(search)
        if len(findings) > 1:
            exact = [r for r in findings if r.exact_match_percent == 100]
            if len(exact) != 1:
                raise AmbiguousInput(search, findings)
            findings = exact
        return findings[0].to_item_ref()

    async def run(self, search: str) -> CommentReport | None:
        """コマンドを実行して返信する"""
        try:
            item = self.get_item(search)
        except NotFound:
            self.channel.reply(f"No items found matching <highlight>{search}<end>.")
            return None
        except AmbiguousInput as e:
            logger.debug("Search {!r} is ambiguous: {} choices", search, len(e.choices))
            self.channel.reply(self.build_choices_blob(e))
            return None

        report = await self.manager.collect(item)
        self.channel.reply(self.build_message(report))
        return report

    def item_link(self, item: ItemRef) -> str:
        return self.channel.make_item_link(item.low_id, item.high_id, item.ql, item.name)

    def build_choices_blob(self, error: AmbiguousInput) -> str:
        """候補から選ばせるためのブロブを作成"""
        blob = f"Search: <highlight>{error.search}<end>\n"
        for choice in error.choices:
            link = self.channel.make_item_link(
                choice.low_id, choice.high_id, choice.high_ql, choice.name
            )
            command = self.channel.make_chat_link(
                "See Comments", f"/tell <myname> {COMMAND_NAME} {link}"
            )
            blob += f"[{command}] {link}\n"
        num = len(error.choices)
        if num == self.resolver.max_results:
            blob += (
                "\n\n<highlight>*Results have been limited to the first "
                f"{self.resolver.max_results} results.<end>"
            )
        blob += "\n\n"
        return self.channel.make_blob(
            f"Item Search Results ({num})",
            blob,
            "Choose item for which to display comments",
        )

    def build_message(self, report: CommentReport) -> str:
        """取得結果から返信メッセージを作成

        2つのソースは互いに独立したセクションとして表示する。
        """
        item_link = self.item_link(report.item)
        if report.total_count == 0:
            return f"No comments found for {item_link}."

        sections: list[str] = []
        tree_text, tree_count = render_tree(report.tree_comments)
        if tree_count:
            sections.append(f"<header2>AOGalaxy ({tree_count})<end>\n\n{tree_text}")
        if report.flat_comments:
            sections.append(
                f"<header2>Auno ({report.flat_count})<end>\n\n"
                f"{render_flat(report.flat_comments)}"
            )

        count = tree_count + report.flat_count
        blob = self.channel.make_blob(
            f"{count} comments",
            ENTRY_SEPARATOR.join(sections),
            f"{count} Comments for {item_link}",
        )
        return f"{blob} found for {item_link}"
