#!/usr/bin/env python3
"""Item Comments - TyperベースのCLIエントリーポイント."""

from __future__ import annotations

import asyncio
import sys
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger

from src.bot.comments_command import CommentsCommand
from src.bot.console import ConsoleReplyChannel
from src.bot.items import LocalItemDatabase
from src.models.data_models import CommentReport
from src.scraper.manager import CommentManager
from src.utils.config import Config, config
from src.utils.export import DataExporter

app = typer.Typer(add_completion=False, help="アイテムのコメントを取得して表示するCLIツール")


class OutputFormat(str, Enum):
    """出力フォーマットの選択肢."""

    JSON = "json"
    CSV = "csv"
    BOTH = "both"


QueryArgument = Annotated[
    str,
    typer.Argument(help="アイテム名またはアイテムリンク"),
]
ItemsDbOption = Annotated[
    Path | None,
    typer.Option("--items-db", help="アイテムデータベースのCSVファイル"),
]
OutputPathOption = Annotated[
    Path | None,
    typer.Option("--output", "-o", help="取得結果の出力ファイルパス"),
]
OutputFormatOption = Annotated[
    OutputFormat | None,
    typer.Option(
        "--format",
        "-f",
        help="出力フォーマット",
        case_sensitive=False,
    ),
]
ListSourcesFlag = Annotated[
    bool,
    typer.Option(
        "--list-sources",
        help="コメントソース一覧を表示",
        is_flag=True,
    ),
]
ConfigPathOption = Annotated[
    Path | None,
    typer.Option("--config-path", help="設定ファイルのパス"),
]
VerboseFlag = Annotated[
    bool,
    typer.Option(
        "--verbose",
        "-v",
        help="詳細ログを出力",
        is_flag=True,
    ),
]


def setup_logging(verbose: bool) -> None:
    """ログ設定を初期化."""
    if verbose:
        logger.remove()
        logger.add(sys.stderr, level="DEBUG")
        return

    log_config = config.get_logging_config()
    logger.remove()
    logger.add(
        sys.stderr,
        level=log_config.get("level", "INFO"),
        format=log_config.get("format", "{time} | {level} | {message}"),
    )

    log_file = Path(log_config.get("file", "logs/comments.log"))
    log_file.parent.mkdir(parents=True, exist_ok=True)

    logger.add(
        log_file,
        level=log_config.get("level", "INFO"),
        format=log_config.get("format", "{time} | {level} | {message}"),
        rotation=log_config.get("rotation", "1 day"),
        retention=log_config.get("retention", "7 days"),
        encoding="utf-8",
    )


@app.command()
def main(
    query: QueryArgument = "",
    items_db: ItemsDbOption = None,
    output: OutputPathOption = None,
    output_format: OutputFormatOption = None,
    list_sources: ListSourcesFlag = False,
    config_path: ConfigPathOption = None,
    verbose: VerboseFlag = False,
) -> None:
    """Item Commentsのメインコマンド."""
    if config_path is not None:
        global config
        config = Config(config_path)

    setup_logging(verbose)

    items_config = config.get_items_config()
    database_path = items_db or Path(items_config.get("database", "data/items.csv"))

    if list_sources:
        enabled_sources = set(config.get_enabled_sources())
        typer.echo("コメントソース:")
        for source in CommentManager.get_available_sources():
            status = "有効" if source in enabled_sources else "無効"
            typer.echo(f"  - {source} ({status})")
        raise typer.Exit()

    if not query.strip():
        typer.echo("エラー: 検索するアイテムが指定されていません。", err=True)
        raise typer.Exit(code=1)

    if not database_path.exists():
        typer.echo(
            f"エラー: アイテムデータベースが見つかりません: {database_path}", err=True
        )
        raise typer.Exit(code=1)

    resolver = LocalItemDatabase.from_csv(
        database_path, max_results=int(items_config.get("max_results", 40))
    )
    channel = ConsoleReplyChannel()
    command = CommentsCommand(
        resolver, channel, CommentManager(resolver.resolve_by_id, config)
    )

    report = asyncio.run(command.run(query))
    if report is None or output is None:
        return

    resolved_format = output_format
    if resolved_format is None:
        try:
            resolved_format = OutputFormat(
                str(config.get_defaults().get("output_format", "json"))
            )
        except ValueError:
            resolved_format = OutputFormat.JSON

    export_report(report, output, resolved_format)


def export_report(
    report: CommentReport, output: Path, output_format: OutputFormat
) -> None:
    """取得結果をファイルに出力."""
    export_config = config.get_export_config()
    exporter = DataExporter(
        include_raw_text=bool(export_config.get("include_raw_text", False))
    )
    output.parent.mkdir(parents=True, exist_ok=True)

    if output_format is OutputFormat.JSON:
        if exporter.export_to_json(report, output):
            typer.echo(f"データをJSONファイルに出力しました: {output}")
    elif output_format is OutputFormat.CSV:
        if exporter.export_to_csv(report, output):
            typer.echo(f"データをCSVファイルに出力しました: {output}")
    else:
        json_file = output.with_suffix(".json")
        csv_file = output.with_suffix(".csv")
        if exporter.export_to_json(report, json_file):
            typer.echo(f"JSONファイルに出力: {json_file}")
        if exporter.export_to_csv(report, csv_file):
            typer.echo(f"CSVファイルに出力: {csv_file}")


if __name__ == "__main__":
    app()
