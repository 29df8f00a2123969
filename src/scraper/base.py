"""コメントソースの基底クラス."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from types import TracebackType
from typing import Any, Generic, TypeVar

import aiohttp
from loguru import logger

from ..models.data_models import FetchResult
from ..models.errors import NetworkFailure, ParseFailure
from ..utils.config import config

T = TypeVar("T")


class BaseScraper(ABC, Generic[T]):
    """コメントソースの基底クラス

    1ソースにつき1つの ``aiohttp.ClientSession`` を持つ。取得の失敗は
    全て空の結果として扱い、呼び出し元には例外を投げない。
    """

    def __init__(
        self,
        site_name: str,
        url_template: str,
        http_config: dict[str, Any] | None = None,
    ) -> None:
        self.site_name = site_name
        self.url_template = url_template
        self.session: aiohttp.ClientSession | None = None

        if http_config is None:
            http_config = config.get_http_config()
        self.connect_timeout = float(http_config.get("connect_timeout", 5))
        self.tls_timeout = float(http_config.get("tls_timeout", 5))
        self.transfer_timeout = float(http_config.get("transfer_timeout", 5))
        self.total_timeout = float(http_config.get("total_timeout", 10))
        self.user_agent = str(http_config.get("user_agent", "ItemComments/1.0"))

    async def __aenter__(self) -> BaseScraper[T]:
        """非同期コンテキストマネージャーの開始"""
        self.session = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(
                total=self.total_timeout,
                connect=self.connect_timeout + self.tls_timeout,
                sock_connect=self.connect_timeout,
                sock_read=self.transfer_timeout,
            ),
            headers={"User-Agent": self.user_agent},
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """非同期コンテキストマネージャーの終了"""
        if self.session:
            await self.session.close()

    def build_url(self, item_id: int) -> str:
        return self.url_template.format(item_id=item_id)

    async def fetch(self, url: str) -> FetchResult:
        """URLを取得（失敗時は空の結果を返す）"""
        if self.session is None:
            logger.error("Session is not initialized")
            return FetchResult.empty(url, "session not initialized")

        try:
            return await asyncio.wait_for(
                self._request(url), timeout=self.total_timeout
            )
        except asyncio.TimeoutError:
            logger.warning("Timeout after {}s fetching {}", self.total_timeout, url)
            return FetchResult.empty(url, "timeout")
        except NetworkFailure as e:
            logger.warning("{} for {}", e, url)
            return FetchResult.empty(url, str(e))
        except Exception as e:
            logger.error("Error fetching {}: {}", url, e)
            return FetchResult.empty(url, str(e))

    async def _request(self, url: str) -> FetchResult:
        assert self.session is not None
        async with self.session.get(url) as response:
            if not 200 <= response.status < 300:
                raise NetworkFailure(f"HTTP {response.status}")
            body = await response.read()
            if not body:
                raise NetworkFailure("Empty response body")
            return FetchResult(url=url, status=response.status, body=body)

    @abstractmethod
    def parse(self, payload: bytes) -> list[T]:
        """取得したデータをコメント一覧に変換（サブクラスで実装）"""
        pass

    async def fetch_comments(self, item_id: int) -> list[T]:
        """アイテムのコメントを取得

        通信エラーやパースエラーは空のリストになる。
        """
        url = self.build_url(item_id)
        logger.debug("Fetching {} comments from {}", self.site_name, url)

        result = await self.fetch(url)
        if result.is_empty:
            logger.info(
                "No data from {} for item {}: {}", self.site_name, item_id, result.error
            )
            return []

        try:
            comments = self.parse(result.body)
        except ParseFailure as e:
            logger.warning(
                "Could not parse {} response for item {}: {}", self.site_name, item_id, e
            )
            return []

        logger.info(
            "Found {} comments on {} for item {}", len(comments), self.site_name, item_id
        )
        return comments
