"""コメント取得マネージャー - 複数ソースの並行取得を管理."""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from datetime import datetime
from typing import Any

from loguru import logger

from ..models.data_models import CommentReport, FlatComment, ItemRef, TreeComment
from ..utils.config import Config, config
from ..utils.render import merge_comments
from ..utils.sanitizer import ItemLookup, TextSanitizer
from .aogalaxy import AOGalaxyScraper
from .auno import AunoScraper

SOURCES = ("auno", "aogalaxy")


class CommentManager:
    """コメント取得マネージャー"""

    def __init__(
        self,
        resolve_item: ItemLookup,
        settings: Config | None = None,
    ) -> None:
        self.settings = settings or config
        self.sanitizer = TextSanitizer(resolve_item)
        self.join_timeout = float(self.settings.get_defaults().get("join_timeout", 15))

    @staticmethod
    def get_available_sources() -> list[str]:
        """利用可能なソース一覧を取得"""
        return list(SOURCES)

    def create_auno_scraper(self) -> AunoScraper:
        return AunoScraper(
            self.sanitizer,
            url_template=self.settings.get_source_config("auno").get("url"),
            http_config=self.settings.get_http_config(),
        )

    def create_aogalaxy_scraper(self) -> AOGalaxyScraper:
        source_config = self.settings.get_source_config("aogalaxy")
        return AOGalaxyScraper(
            self.sanitizer,
            url_template=source_config.get("url"),
            http_config=self.settings.get_http_config(),
            max_depth=source_config.get("max_depth"),
        )

    async def collect(self, item: ItemRef) -> CommentReport:
        """アイテムのコメントを全ソースから並行取得"""
        logger.info(
            "Collecting comments for {} ({}/{})", item.name, item.low_id, item.high_id
        )
        fetched_at = datetime.now()

        auno = self.create_auno_scraper()
        galaxy = self.create_aogalaxy_scraper()
        async with auno, galaxy:
            # タスク名 -> コルーチン
            tasks: dict[str, Coroutine[Any, Any, Any]] = {}
            if self.settings.is_source_enabled("auno"):
                tasks["auno_low"] = auno.fetch_comments(item.low_id)
                if item.high_id != item.low_id:
                    tasks["auno_high"] = auno.fetch_comments(item.high_id)
            if self.settings.is_source_enabled("aogalaxy"):
                tasks["aogalaxy"] = galaxy.fetch_comments(item.low_id)

            results = await self._join(tasks)

        flat_comments: list[FlatComment] = merge_comments(
            results.get("auno_low", []), results.get("auno_high", [])
        )
        tree_comments: list[TreeComment] = results.get("aogalaxy", [])

        report = CommentReport(
            item=item,
            fetched_at=fetched_at,
            flat_comments=flat_comments,
            tree_comments=tree_comments,
        )
        logger.info(
            "Collected {} comments for {} (auno: {}, aogalaxy: {})",
            report.total_count,
            item.name,
            report.flat_count,
            report.tree_count,
        )
        return report

    async def _join(
        self, tasks: dict[str, Coroutine[Any, Any, Any]]
    ) -> dict[str, list[Any]]:
        """全タスクの完了を待つ（全体のタイムアウト付き）

        時間内に終わらなかったタスクだけを取り消し、その結果を空にする。
        完了済みのタスクの結果は残す。
        """
        if not tasks:
            return {}

        running = {
            name: asyncio.create_task(coro, name=name) for name, coro in tasks.items()
        }
        _, pending = await asyncio.wait(running.values(), timeout=self.join_timeout)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        final_results: dict[str, list[Any]] = {}
        for name, task in running.items():
            if task in pending:
                logger.error("Task {} did not finish within {}s", name, self.join_timeout)
                final_results[name] = []
                continue
            exception = task.exception()
            if exception is not None:
                logger.error("Exception in task {}: {}", name, exception)
                final_results[name] = []
            else:
                final_results[name] = task.result()
        return final_results
