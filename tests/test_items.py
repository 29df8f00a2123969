"""
ローカルアイテムデータベースとマークアップのテスト
"""
import pandas as pd
import pytest

from src.bot.console import ConsoleReplyChannel
from src.bot.items import LocalItemDatabase
from src.models.data_models import ItemRef
from src.utils import markup

ITEMS = pd.DataFrame(
    [
        {"lowid": 246817, "highid": 246818, "lowql": 1, "highql": 300, "name": "Combined Commando's Jacket"},
        {"lowid": 246819, "highid": 246820, "lowql": 1, "highql": 300, "name": "Combined Commando's Gloves"},
        {"lowid": 211158, "highid": 211158, "lowql": 200, "highql": 200, "name": "Tarasque Shoulderpad"},
    ]
)


class TestLocalItemDatabase:
    """ローカルアイテムデータベースのテストクラス"""

    @pytest.fixture
    def database(self):
        return LocalItemDatabase(ITEMS, max_results=10)

    def test_search_all_words(self, database):
        results = database.search("combined jacket")

        assert [r.name for r in results] == ["Combined Commando's Jacket"]
        assert results[0].exact_match_percent == 66

    def test_search_exact_match(self, database):
        results = database.search("Combined Commando's")
        assert len(results) == 2

        results = database.search("combined commando's gloves")
        assert results[0].exact_match_percent == 100
        assert results[0].low_id == 246819

    def test_search_nothing(self, database):
        assert database.search("nanite") == []
        assert database.search("   ") == []

    def test_resolve_by_low_or_high_id(self, database):
        assert database.resolve_by_id(246818).name == "Combined Commando's Jacket"
        assert database.resolve_by_id(246817).low_ql == 1
        assert database.resolve_by_id(1) is None

    def test_parse_direct_reference(self, database):
        item = database.parse_direct_reference(
            "<a href='itemref://246817/246818/250'>Combined Commando's Jacket</a>"
        )
        assert item == ItemRef(
            low_id=246817, high_id=246818, ql=250, name="Combined Commando's Jacket"
        )
        assert database.parse_direct_reference("jacket") is None

    def test_from_csv(self, tmp_path):
        path = tmp_path / "items.csv"
        ITEMS.to_csv(path, index=False)

        database = LocalItemDatabase.from_csv(path, max_results=5)
        assert database.max_results == 5
        assert len(database.search("tarasque")) == 1

    def test_missing_columns(self):
        with pytest.raises(ValueError):
            LocalItemDatabase(pd.DataFrame([{"name": "x"}]))


class TestMarkup:
    """マークアップ生成のテストクラス"""

    def test_item_link_round_trip(self):
        link = markup.make_item_link(1, 2, 3, "Thing")
        assert link == '<a href="itemref://1/2/3">Thing</a>'
        assert markup.parse_item_reference(link) == ItemRef(
            low_id=1, high_id=2, ql=3, name="Thing"
        )

    def test_blob_escapes_quotes(self):
        blob = markup.make_blob("Title", 'say "hi"', "Tip")
        assert blob == '<a href="text://<header>Tip<end>\n\nsay &quot;hi&quot;">Title</a>'

    def test_paginate(self):
        body = "aaaa<pagebreak>bbbb<pagebreak>cccc"
        assert markup.paginate(body, max_length=9) == ["aaaabbbb", "cccc"]
        assert markup.paginate(body) == ["aaaabbbbcccc"]
        assert markup.paginate("") == []

    def test_paginate_oversized_chunk(self):
        assert markup.paginate("x" * 20 + "<pagebreak>y", max_length=5) == ["x" * 20, "y"]


class TestConsoleReplyChannel:
    """ターミナル返信先のテストクラス"""

    def test_expand_blob_pages(self, capsys):
        channel = ConsoleReplyChannel(page_length=5)
        blob = channel.make_blob("2 comments", "one<pagebreak>two", "Tip")

        channel.reply(f"{blob} found")

        output = capsys.readouterr().out
        assert "--- 2 comments (page 1/2) ---" in output
        assert "--- 2 comments (page 2/2) ---" in output
        assert output.rstrip().endswith("found")
        assert channel.replies == [f"{blob} found"]

    def test_plain_reply(self, capsys):
        channel = ConsoleReplyChannel()
        channel.reply("No comments found.")
        assert capsys.readouterr().out == "No comments found.\n"
