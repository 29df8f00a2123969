"""
commentsコマンドのテスト
"""
from datetime import date, datetime
from unittest.mock import AsyncMock

import pytest

from src.bot.comments_command import CommentsCommand
from src.models.data_models import (
    CommentReport,
    FlatComment,
    ItemRef,
    ItemSearchResult,
    TreeComment,
)
from src.models.errors import AmbiguousInput, NotFound
from src.utils import markup


class FakeResolver:
    """検索結果を固定で返すアイテムデータベース"""

    def __init__(self, results=None, reference=None, max_results=40):
        self.results = results or []
        self.reference = reference
        self.max_results = max_results
        self.searches = []

    def search(self, text):
        self.searches.append(text)
        return list(self.results)

    def parse_direct_reference(self, text):
        return self.reference

    def resolve_by_id(self, item_id):
        return None


class RecordingChannel:
    """返信を記録する返信先"""

    def __init__(self):
        self.replies = []

    def reply(self, text):
        self.replies.append(text)

    def make_blob(self, title, body, tooltip=None):
        return markup.make_blob(title, body, tooltip)

    def make_chat_link(self, label, command):
        return markup.make_chat_link(label, command)

    def make_item_link(self, low_id, high_id, ql, name):
        return markup.make_item_link(low_id, high_id, ql, name)


def result(low_id, high_id, name, exact=0):
    return ItemSearchResult(
        low_id=low_id,
        high_id=high_id,
        low_ql=1,
        high_ql=300,
        name=name,
        exact_match_percent=exact,
    )


JACKET = result(246817, 246818, "Combined Commando's Jacket", exact=100)
GLOVES = result(246819, 246820, "Combined Commando's Gloves", exact=66)
BOOTS = result(246821, 246822, "Combined Commando's Boots", exact=66)


def make_manager(report=None):
    manager = AsyncMock()
    manager.collect = AsyncMock(return_value=report)
    return manager


def make_report(item, flat=None, tree_comments=None):
    return CommentReport(
        item=item,
        fetched_at=datetime(2024, 1, 1, 12, 0),
        flat_comments=flat or [],
        tree_comments=tree_comments or [],
    )


class TestGetItem:
    """アイテム特定のテストクラス"""

    def test_not_found(self):
        command = CommentsCommand(FakeResolver([]), RecordingChannel(), make_manager())
        with pytest.raises(NotFound):
            command.get_item_from_search("nothing")

    def test_single_result(self):
        command = CommentsCommand(FakeResolver([GLOVES]), RecordingChannel(), make_manager())
        item = command.get_item_from_search("gloves")

        assert item == ItemRef(low_id=246819, high_id=246820, ql=300, name=GLOVES.name)

    def test_exact_match_bypasses_choice(self):
        """完全一致が1件だけなら候補を出さずに決定する"""
        resolver = FakeResolver([GLOVES, JACKET, BOOTS])
        command = CommentsCommand(resolver, RecordingChannel(), make_manager())

        assert command.get_item_from_search("combined commando's jacket").low_id == 246817

    def test_two_exact_matches_are_ambiguous(self):
        other = result(1, 2, "Combined Commando's Jacket", exact=100)
        command = CommentsCommand(
            FakeResolver([JACKET, other]), RecordingChannel(), make_manager()
        )
        with pytest.raises(AmbiguousInput) as excinfo:
            command.get_item_from_search("combined commando's jacket")

        assert len(excinfo.value.choices) == 2

    def test_duplicates_are_collapsed(self):
        """同じlow/highの組み合わせは1件として扱う"""
        resolver = FakeResolver([GLOVES, GLOVES.model_copy(update={"exact_match_percent": 0})])
        command = CommentsCommand(resolver, RecordingChannel(), make_manager())

        assert command.get_item_from_search("gloves").low_id == 246819

    def test_direct_reference_skips_search(self):
        reference = ItemRef(low_id=5, high_id=6, ql=150, name="Thing")
        resolver = FakeResolver([GLOVES, BOOTS], reference=reference)
        command = CommentsCommand(resolver, RecordingChannel(), make_manager())

        assert command.get_item('<a href="itemref://5/6/150">Thing</a>') == reference
        assert resolver.searches == []


class TestRun:
    """コマンド実行のテストクラス"""

    @pytest.mark.asyncio
    async def test_not_found_halts_before_fetch(self):
        """検索結果0件ならメッセージを返して取得は行わない"""
        channel = RecordingChannel()
        manager = make_manager()
        command = CommentsCommand(FakeResolver([]), channel, manager)

        assert await command.run("nothing") is None
        assert channel.replies == ["No items found matching <highlight>nothing<end>."]
        manager.collect.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_ambiguous_shows_choices(self):
        channel = RecordingChannel()
        manager = make_manager()
        command = CommentsCommand(FakeResolver([GLOVES, BOOTS]), channel, manager)

        assert await command.run("combined") is None
        assert len(channel.replies) == 1
        reply = channel.replies[0]
        assert reply.endswith(">Item Search Results (2)</a>")
        assert reply.count("See Comments") == 2
        assert "limited to the first" not in reply
        manager.collect.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_truncation_notice(self):
        channel = RecordingChannel()
        command = CommentsCommand(
            FakeResolver([GLOVES, BOOTS], max_results=2), channel, make_manager()
        )
        await command.run("combined")

        assert "Results have been limited to the first 2 results." in channel.replies[0]

    @pytest.mark.asyncio
    async def test_no_comments(self):
        item = JACKET.to_item_ref()
        channel = RecordingChannel()
        manager = make_manager(make_report(item))
        command = CommentsCommand(FakeResolver([JACKET]), channel, manager)

        report = await command.run("jacket")

        manager.collect.assert_awaited_once_with(item)
        assert report.total_count == 0
        assert channel.replies == [
            'No comments found for <a href="itemref://246817/246818/300">'
            "Combined Commando's Jacket</a>."
        ]

    @pytest.mark.asyncio
    async def test_comments_blob(self):
        """両ソースのコメントを独立したセクションとして返信する"""
        item = JACKET.to_item_ref()
        flat = [FlatComment(author="Nadyita", timestamp_raw="2021-03-04 12:30", body="Old")]
        tree_comments = [
            TreeComment(
                id=1,
                raw_body="New",
                author="Alice",
                rank_score=0,
                timestamp=date(2023, 1, 5),
                body="New",
                children=[
                    TreeComment(
                        id=2,
                        raw_body="Reply",
                        author="Bob",
                        rank_score=0,
                        timestamp=date(2023, 1, 6),
                        body="Reply",
                    )
                ],
            )
        ]
        channel = RecordingChannel()
        command = CommentsCommand(
            FakeResolver([JACKET]),
            channel,
            make_manager(make_report(item, flat, tree_comments)),
        )

        await command.run("jacket")

        reply = channel.replies[0]
        item_link = '<a href="itemref://246817/246818/300">Combined Commando\'s Jacket</a>'
        assert reply.startswith('<a href="text://')
        assert reply.endswith(f">3 comments</a> found for {item_link}")
        assert "AOGalaxy (2)" in reply
        assert "Auno (1)" in reply
        assert reply.index("<orange>Alice<end>") < reply.index("<tab>02 - ")
        assert "<highlight>Nadyita<end> <grey>[2021-03-04 12:30]<end>" in reply

    @pytest.mark.asyncio
    async def test_only_flat_section(self):
        item = JACKET.to_item_ref()
        flat = [FlatComment(author="Nadyita", timestamp_raw="2021-03-04 12:30", body="Old")]
        channel = RecordingChannel()
        command = CommentsCommand(
            FakeResolver([JACKET]), channel, make_manager(make_report(item, flat))
        )

        await command.run("jacket")

        assert "AOGalaxy" not in channel.replies[0]
        assert "Auno (1)" in channel.replies[0]
        assert ">1 comments</a>" in channel.replies[0]
