"""設定管理ユーティリティ."""

from __future__ import annotations

from pathlib import Path
from typing import Any, TypeVar, cast

import yaml
from loguru import logger

T = TypeVar("T")


class Config:
    """設定管理クラス."""

    def __init__(self, config_path: str | Path | None = None) -> None:
        if config_path is None:
            config_path = (
                Path(__file__).parent.parent.parent / "config" / "settings.yaml"
            )

        self.config_path = Path(config_path)
        self._config: dict[str, Any] = {}
        self.load_config()

    def load_config(self) -> None:
        """設定ファイルを読み込み"""
        try:
            if self.config_path.exists():
                with open(self.config_path, encoding="utf-8") as file:
                    self._config = yaml.safe_load(file) or {}
                logger.info("Configuration loaded from {}", self.config_path)
            else:
                logger.warning("Configuration file not found: {}", self.config_path)
                self._config = self._get_default_config()
        except Exception as e:
            logger.error("Error loading configuration: {}", e)
            self._config = self._get_default_config()

    def _get_default_config(self) -> dict[str, Any]:
        """デフォルト設定を返す"""
        return {
            "defaults": {
                "join_timeout": 15,
                "output_format": "json",
            },
            "http": {
                "connect_timeout": 5,
                "tls_timeout": 5,
                "transfer_timeout": 5,
                "total_timeout": 10,
                "user_agent": "ItemComments/1.0",
            },
            "sources": {
                "auno": {
                    "enabled": True,
                    "url": "https://auno.org/ao/db.php?id={item_id}",
                },
                "aogalaxy": {
                    "enabled": True,
                    "url": (
                        "https://www.aogalaxy.com/_items/get_item_comments.php"
                        "?itemAOID={item_id}"
                    ),
                    "max_depth": 32,
                },
            },
            "items": {
                "database": "data/items.csv",
                "max_results": 40,
            },
            "logging": {
                "level": "INFO",
                "format": (
                    "{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function}:{line}"
                    " - {message}"
                ),
                "file": "logs/comments.log",
                "rotation": "1 day",
                "retention": "7 days",
            },
            "export": {
                "include_raw_text": False,
            },
        }

    def get(self, key: str, default: T | None = None) -> T | None:
        """設定値を取得（ドット記法対応）"""
        keys = key.split(".")
        current: Any = self._config

        try:
            for k in keys:
                current = current[k]
            return cast(T | None, current)
        except (KeyError, TypeError):
            return default

    def _get_section(self, key: str) -> dict[str, Any]:
        section: Any = self.get(key, {})
        return section if isinstance(section, dict) else {}

    def get_defaults(self) -> dict[str, Any]:
        """デフォルト設定を取得"""
        return self._get_section("defaults")

    def get_http_config(self) -> dict[str, Any]:
        """HTTPタイムアウト等の設定を取得"""
        return self._get_section("http")

    def get_source_config(self, source_name: str) -> dict[str, Any]:
        """コメントソース別設定を取得"""
        return self._get_section(f"sources.{source_name}")

    def get_items_config(self) -> dict[str, Any]:
        """アイテムデータベースの設定を取得"""
        return self._get_section("items")

    def get_logging_config(self) -> dict[str, Any]:
        """ログ設定を取得"""
        return self._get_section("logging")

    def get_export_config(self) -> dict[str, Any]:
        """エクスポート設定を取得"""
        return self._get_section("export")

    def is_source_enabled(self, source_name: str) -> bool:
        """ソースが有効かチェック"""
        source_enabled: Any = self.get(f"sources.{source_name}.enabled", False)
        return bool(source_enabled)

    def get_enabled_sources(self) -> list[str]:
        """有効なソース一覧を取得"""
        sources_config: Any = self.get("sources", {})
        if not isinstance(sources_config, dict):
            return []
        return [
            name
            for name, source in sources_config.items()
            if isinstance(source, dict) and source.get("enabled", False)
        ]


# グローバル設定インスタンス
config = Config()
