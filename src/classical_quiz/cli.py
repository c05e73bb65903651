"""``classical-quiz`` command line entry point."""

from __future__ import annotations

import argparse
import sys
from collections import Counter
from pathlib import Path
from typing import Any, Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .catalog.cache import ALL_CATEGORIES, CatalogCache
from .catalog.composers import normalize
from .catalog.fetcher import CatalogFetcher
from .catalog.models import SUPPORTED_LANGUAGES
from .catalog.preferences import LanguagePreferenceStore
from .core import workspace as workspace_mod
from .core.logging import LOGGER_ROOT, configure_logger
from .play import InputProvider, run_quiz
from .quiz.engine import QuizEngine
from .quiz.models import QuizFormat, parse_question_count
from .quiz.validation import validate_nickname
from .ranking.client import RankingClient, RankingType
from .settings import (
    CONFIG_FILENAME,
    ConfigOverrides,
    LoadResult,
    QuizConfigError,
    load_config,
    write_template,
)


def _common_options() -> argparse.ArgumentParser:
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument("--config", type=Path, help="Path to a TOML config file.")
    parent.add_argument(
        "--workspace",
        type=Path,
        help="Override the workspace root (defaults to CLASSICAL_QUIZ_HOME).",
    )
    parent.add_argument("--catalog-url", help="Override catalog.base_url.")
    parent.add_argument("--ranking-url", help="Override ranking.base_url.")
    parent.add_argument("--log-level", help="Logging level for the log file.")
    parent.add_argument(
        "--verbose",
        action="store_true",
        default=None,
        help="Mirror log output to stderr.",
    )
    return parent


def build_arg_parser() -> argparse.ArgumentParser:
    common = _common_options()
    parser = argparse.ArgumentParser(
        prog="classical-quiz",
        description="Classical music listening quiz.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sp_init = sub.add_parser(
        "init", parents=[common], help="Bootstrap the workspace directories."
    )
    sp_init.add_argument("--quiet", action="store_true")

    sp_config = sub.add_parser("config", help="Configuration file commands.")
    config_sub = sp_config.add_subparsers(dest="action", required=True)
    sp_config_init = config_sub.add_parser(
        "init", parents=[common], help=f"Write the default {CONFIG_FILENAME}."
    )
    sp_config_init.add_argument("--path", type=Path)
    sp_config_init.add_argument("--force", action="store_true")

    sp_lang = sub.add_parser(
        "language", parents=[common], help="Show or set the catalog language."
    )
    sp_lang.add_argument("code", nargs="?", choices=SUPPORTED_LANGUAGES)

    sp_catalog = sub.add_parser(
        "catalog", parents=[common], help="List catalog pieces for study."
    )
    sp_catalog.add_argument("--category", default=ALL_CATEGORIES)
    sp_catalog.add_argument(
        "--composers",
        action="store_true",
        help="List composer categories with piece counts instead.",
    )

    sp_play = sub.add_parser("play", parents=[common], help="Play a quiz.")
    sp_play.add_argument("--nickname", required=True)
    sp_play.add_argument(
        "--format", choices=[member.value for member in QuizFormat]
    )
    sp_play.add_argument("--category", default=ALL_CATEGORIES)
    sp_play.add_argument("--count", help="Number of questions or 'all'.")
    sp_play.add_argument(
        "--submit",
        action="store_true",
        help="Submit the final score to the ranking service.",
    )
    sp_play.add_argument(
        "--no-trivia", dest="trivia", action="store_false", default=True
    )

    sp_rank = sub.add_parser(
        "ranking", parents=[common], help="Show the leaderboard."
    )
    sp_rank.add_argument("--category", default=ALL_CATEGORIES)
    sp_rank.add_argument(
        "--type",
        dest="ranking_type",
        choices=[member.value for member in RankingType],
        default=RankingType.DAILY.value,
    )
    sp_rank.add_argument(
        "--format",
        choices=[member.value for member in QuizFormat],
        default=QuizFormat.AUDIO_TO_TITLE.value,
    )
    return parser


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    console: Optional[Console] = None,
    input_provider: Optional[InputProvider] = None,
    http_session: Optional[Any] = None,
) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    out = console or Console()

    if args.command == "init":
        return _cmd_init(args, out)

    try:
        loaded = load_config(
            config_path=args.config,
            overrides=ConfigOverrides(
                catalog_url=args.catalog_url,
                ranking_url=args.ranking_url,
                log_level=args.log_level,
                verbose=args.verbose,
            ),
            workspace_path=args.workspace,
        )
    except QuizConfigError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 2

    logger, _ = configure_logger(
        LOGGER_ROOT,
        log_dir=loaded.layout.path_for("logs"),
        level=loaded.config.logging.level,
        verbose=loaded.config.logging.verbose,
    )
    logger.debug("classical-quiz invoked", extra={"command": args.command})

    if args.command == "config":
        return _cmd_config_init(args, loaded, out)
    if args.command == "language":
        return _cmd_language(args, loaded, out)
    if args.command == "catalog":
        return _cmd_catalog(args, loaded, out, http_session)
    if args.command == "play":
        provider = input_provider or (lambda: out.input("> "))
        return _cmd_play(args, loaded, out, provider, http_session)
    if args.command == "ranking":
        return _cmd_ranking(args, loaded, out, http_session)
    parser.print_help()  # pragma: no cover - argparse enforces choices
    return 2


def _cmd_init(args: argparse.Namespace, out: Console) -> int:
    try:
        layout = workspace_mod.ensure_workspace(path=args.workspace)
    except workspace_mod.WorkspaceError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 1
    if args.quiet:
        return 0
    status = "created" if layout.created.get("home") else "exists"
    out.print(Text(f"Workspace ready at {layout.home} ({status})"))
    for name, directory in layout.items():
        state = "created" if layout.created.get(name) else "exists"
        out.print(Text(f"  {name:<7} {directory} ({state})"))
    return 0


def _cmd_config_init(
    args: argparse.Namespace, loaded: LoadResult, out: Console
) -> int:
    target = args.path or loaded.layout.path_for("config") / CONFIG_FILENAME
    try:
        written = write_template(target.expanduser(), overwrite=args.force)
    except QuizConfigError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 1
    out.print(Text(f"Wrote config to {written}"))
    return 0


def _preferences(loaded: LoadResult) -> LanguagePreferenceStore:
    return LanguagePreferenceStore.in_directory(loaded.layout.path_for("state"))


def _cmd_language(
    args: argparse.Namespace, loaded: LoadResult, out: Console
) -> int:
    store = _preferences(loaded)
    if args.code is None:
        out.print(store.load())
        return 0
    store.save(args.code)
    out.print(f"Language set to {args.code}")
    return 0


def _build_catalog(
    loaded: LoadResult, http_session: Optional[Any]
) -> CatalogCache:
    settings = loaded.config.catalog
    fetcher = CatalogFetcher(
        base_url=settings.base_url,
        resource=settings.resource,
        timeout=settings.timeout_seconds,
        session=http_session,
    )
    return CatalogCache(fetcher, preferences=_preferences(loaded))


def _load_catalog_or_report(catalog: CatalogCache) -> bool:
    if catalog.load():
        return True
    sys.stderr.write(f"Error: {catalog.error}\n")
    return False


def _cmd_catalog(
    args: argparse.Namespace,
    loaded: LoadResult,
    out: Console,
    http_session: Optional[Any],
) -> int:
    catalog = _build_catalog(loaded, http_session)
    if not _load_catalog_or_report(catalog):
        return 1

    if args.composers:
        counts = Counter(normalize(piece.composer) for piece in catalog.pieces)
        table = Table(title="Composers", box=box.SIMPLE)
        table.add_column("Category")
        table.add_column("Pieces", justify="right")
        for key, count in counts.most_common():
            table.add_row(Text(key), str(count))
        out.print(table)
        return 0

    pieces = catalog.filter_by_composer(args.category)
    if not pieces:
        out.print("No pieces match this category.")
        return 1
    table = Table(title=f"Catalog ({catalog.language})", box=box.SIMPLE)
    table.add_column("ID", style="dim")
    table.add_column("Title", overflow="fold")
    table.add_column("Composer")
    table.add_column("Genre")
    for piece in pieces:
        table.add_row(
            Text(piece.id),
            Text(piece.title),
            Text(piece.composer),
            Text(piece.genre),
        )
    out.print(table)
    return 0


def _cmd_play(
    args: argparse.Namespace,
    loaded: LoadResult,
    out: Console,
    provider: InputProvider,
    http_session: Optional[Any],
) -> int:
    problem = validate_nickname(args.nickname)
    if problem is not None:
        sys.stderr.write(f"Error: {problem.value}\n")
        return 2
    defaults = loaded.config.quiz
    try:
        count = (
            parse_question_count(args.count)
            if args.count is not None
            else defaults.count
        )
    except ValueError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 2
    quiz_format = QuizFormat.from_value(args.format or defaults.format)

    catalog = _build_catalog(loaded, http_session)
    if not _load_catalog_or_report(catalog):
        return 1

    engine = QuizEngine(catalog)
    engine.setup_quiz(args.nickname.strip(), quiz_format, args.category, count)
    try:
        outcome = run_quiz(engine, out, provider, show_trivia=args.trivia)
    finally:
        engine.close()
    if outcome.exit_action == "empty":
        return 1
    if outcome.exit_action != "completed" or not args.submit:
        return 0

    client = RankingClient(
        loaded.config.ranking.base_url,
        timeout=loaded.config.ranking.timeout_seconds,
        session=http_session,
    )
    rank = client.submit_result(outcome.result)
    if rank is None:
        sys.stderr.write(f"Error: {client.error}\n")
        return 1
    out.print(f"Ranked #{rank.rank} with {rank.score} points.")
    return 0


def _cmd_ranking(
    args: argparse.Namespace,
    loaded: LoadResult,
    out: Console,
    http_session: Optional[Any],
) -> int:
    client = RankingClient(
        loaded.config.ranking.base_url,
        timeout=loaded.config.ranking.timeout_seconds,
        session=http_session,
    )
    ranks = client.fetch_ranking(args.category, args.ranking_type, args.format)
    if client.error is not None:
        sys.stderr.write(f"Error: {client.error}\n")
        return 1
    if not ranks:
        out.print("No scores yet.")
        return 0
    table = Table(
        title=Text(f"Ranking: {args.category} / {args.ranking_type} / {args.format}"),
        box=box.SIMPLE,
    )
    table.add_column("#", justify="right")
    table.add_column("Nickname")
    table.add_column("Score", justify="right")
    table.add_column("Date", style="dim")
    for rank in ranks:
        table.add_row(
            str(rank.rank), Text(rank.nickname), str(rank.score), Text(rank.created_at)
        )
    out.print(table)
    return 0


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(main())
