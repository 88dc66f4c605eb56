"""Command-line interface for the Archipelago catalog builder."""

from __future__ import annotations

import argparse
import logging
import os
import shlex
import sys
from datetime import datetime
from pathlib import Path

from .cache import EnrichmentCache
from .clients import RAWGClient
from .models import OUTCOMES
from .pipelines.build_pipeline import run_build
from .search import TOOLS_INCLUDE, TOOLS_MODES, GameFilters, filter_games, filter_options, split_values
from .utils import ProjectPaths, resolve_rawg_api_key


def setup_logging(log_file: Path) -> None:
    """Configure logging to both console and file."""
    log_file.parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(
        "%(asctime)s.%(msecs)03d - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )

    # File handler
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)

    # Root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO)
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    # Silence verbose HTTP debug logs by default
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)

    logging.info(f"Logging to file: {log_file}")


def _project_paths(args: argparse.Namespace) -> ProjectPaths:
    data_dir = getattr(args, "data_dir", None)
    if data_dir is not None:
        paths = ProjectPaths.from_data_dir(data_dir)
    else:
        paths = ProjectPaths.from_root(Path(__file__).resolve().parent.parent)
    paths.ensure()
    return paths


def _default_log_file(*, command_name: str, logs_dir: Path) -> Path:
    logs_dir.mkdir(parents=True, exist_ok=True)

    now = datetime.now()
    stamp = now.strftime("%Y%m%d-%H%M%S") + f".{now.microsecond // 1000:03d}"
    candidate = logs_dir / f"log-{stamp}-{command_name}.log"
    if not candidate.exists():
        return candidate

    for i in range(2, 1000):
        p = logs_dir / f"log-{stamp}-{command_name}-{i}.log"
        if not p.exists():
            return p
    return logs_dir / f"log-{stamp}-{command_name}-{os.getpid()}.log"


def _setup_logging_from_args(
    paths: ProjectPaths,
    log_file: Path | None,
    debug: bool,
    *,
    command_name: str,
) -> None:
    setup_logging(log_file or _default_log_file(command_name=command_name, logs_dir=paths.logs_dir))
    if debug:
        root_logger = logging.getLogger()
        root_logger.setLevel(logging.DEBUG)
        for handler in root_logger.handlers:
            handler.setLevel(logging.DEBUG)
        logging.getLogger("urllib3").setLevel(logging.DEBUG)

    argv = " ".join(shlex.quote(a) for a in sys.argv)
    logging.info(f"Invocation: {argv}")


def _command_build(args: argparse.Namespace) -> None:
    paths = _project_paths(args)
    _setup_logging_from_args(paths, args.log_file, args.debug, command_name="build")
    logging.info("[BUILD] Starting games data build...")

    source_csv = args.source or paths.source_csv
    output_json = args.output or paths.output_json
    cache_path = args.cache or paths.cache_path

    try:
        client = None
        if args.enrich:
            api_key = resolve_rawg_api_key(args.credentials or paths.credentials)
            if not api_key:
                raise RuntimeError(
                    "RAWG API key not configured. Set $RAWG_API_KEY or add rawg.api_key to "
                    f"{args.credentials or paths.credentials} (or pass --no-enrich)."
                )
            client = RAWGClient(api_key=api_key)
        run_build(
            source_csv=source_csv,
            output_json=output_json,
            cache_path=cache_path,
            client=client,
            enrich=bool(args.enrich),
            force=bool(args.force),
        )
        if client is not None:
            logging.info(f"[RAWG] Request stats: {client.format_stats()}")
    except (OSError, ValueError, RuntimeError) as e:
        logging.error(f"[BUILD] ✗ Build failed: {e}")
        raise SystemExit(1) from e


def _command_search(args: argparse.Namespace) -> None:
    from .dataset import load_dataset

    paths = _project_paths(args)
    _setup_logging_from_args(paths, args.log_file, args.debug, command_name="search")

    dataset = args.dataset or paths.output_json
    try:
        records = load_dataset(dataset)
    except (OSError, ValueError) as e:
        logging.error(f"[SEARCH] {e}")
        raise SystemExit(1) from e

    if args.options:
        for facet, values in filter_options(records).items():
            print(f"{facet}: {', '.join(values)}")
        return

    filters = GameFilters(
        query=args.query or "",
        status=split_values(args.status),
        platform=split_values(args.platform),
        emulator=split_values(args.emulator),
        genre=split_values(args.genre),
        letter=args.letter,
        tools=args.tools,
    )
    matches = filter_games(records, filters)
    logging.info(f"[SEARCH] {len(matches)} of {len(records)} games match")

    for r in matches:
        print(f"{r.name} | {r.status} | {r.platform} | {r.emulator}")

    if args.out:
        import pandas as pd

        from .utils import write_csv

        write_csv(pd.DataFrame([r.to_artifact_dict() for r in matches]), args.out)
        logging.info(f"[SEARCH] Wrote {len(matches)} rows to {args.out}")


def _command_mark_tools(args: argparse.Namespace) -> None:
    from .tools.mark_tools import mark_tools

    paths = _project_paths(args)
    _setup_logging_from_args(paths, args.log_file, args.debug, command_name="mark-tools")

    source_csv = args.source or paths.source_csv
    try:
        mark_tools(source_csv, backup=bool(args.backup), overrides_path=args.overrides)
    except (OSError, ValueError) as e:
        logging.error(f"[TOOLS] ✗ Update failed: {e}")
        raise SystemExit(1) from e


def _command_prune_cache(args: argparse.Namespace) -> None:
    paths = _project_paths(args)
    _setup_logging_from_args(paths, args.log_file, args.debug, command_name="prune-cache")

    outcomes = set(split_values(args.outcome))
    unknown = outcomes - set(OUTCOMES)
    if not outcomes or unknown:
        raise SystemExit(f"--outcome expects a comma-separated subset of: {', '.join(OUTCOMES)}")

    cache_path = args.cache or paths.cache_path
    cache = EnrichmentCache.load(cache_path)
    removed = cache.prune(outcomes)
    for name in removed:
        logging.debug(f"[CACHE] Pruned '{name}'")
    if removed:
        cache.save(cache_path)
    logging.info(
        f"✔ Prune completed: removed {len(removed)} entries "
        f"(outcome in {sorted(outcomes)}), kept {len(cache)}"
    )


def _add_logging_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--log-file",
        type=Path,
        help="Log file path (default: data/logs/log-<timestamp>-<command>.log)",
    )
    p.add_argument("--debug", action="store_true", help="Enable DEBUG logging (default: INFO)")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="archipelago-catalog",
        description="Build and query the Archipelago games dataset",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_common_paths = argparse.ArgumentParser(add_help=False)
    p_common_paths.add_argument(
        "--data-dir",
        type=Path,
        help="Data directory holding the source CSV, cache, output and logs (default: <repo>/data)",
    )

    p_build = sub.add_parser(
        "build",
        help="Parse the source CSV, enrich it from RAWG and write games-data.json",
        parents=[p_common_paths],
    )
    p_build.add_argument(
        "--source",
        type=Path,
        help="Source CSV (default: data/Archipelago_Master_Game_List.csv)",
    )
    p_build.add_argument(
        "--output", type=Path, help="Dataset JSON (default: data/output/games-data.json)"
    )
    p_build.add_argument(
        "--cache", type=Path, help="Enrichment cache JSON (default: data/enrichment-cache.json)"
    )
    p_build.add_argument(
        "--credentials", type=Path, help="Credentials YAML (default: data/credentials.yaml)"
    )
    p_build.add_argument(
        "--enrich",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Fetch genres/year/multiplayer from RAWG (default: true)",
    )
    p_build.add_argument(
        "--force",
        action="store_true",
        help="Rebuild even if the source CSV hash matches the existing dataset",
    )
    _add_logging_args(p_build)
    p_build.set_defaults(_fn=_command_build)

    p_search = sub.add_parser(
        "search",
        help="Filter the built dataset the same way the site does",
        parents=[p_common_paths],
    )
    p_search.add_argument(
        "--dataset", type=Path, help="Dataset JSON (default: data/output/games-data.json)"
    )
    p_search.add_argument("-q", "--query", type=str, default="", help="Free-text query")
    p_search.add_argument("--status", type=str, help="Comma-separated statuses")
    p_search.add_argument("--platform", type=str, help="Comma-separated platforms")
    p_search.add_argument("--emulator", type=str, help="Comma-separated emulators")
    p_search.add_argument("--genre", type=str, help="Comma-separated genres")
    p_search.add_argument("--letter", type=str, help="First letter of the game name")
    p_search.add_argument(
        "--tools",
        choices=TOOLS_MODES,
        default=TOOLS_INCLUDE,
        help="Include, exclude or only show Archipelago tools (default: include)",
    )
    p_search.add_argument("--out", type=Path, help="Also write the matches to this CSV")
    p_search.add_argument(
        "--options", action="store_true", help="List available filter values instead of games"
    )
    _add_logging_args(p_search)
    p_search.set_defaults(_fn=_command_search)

    p_tools = sub.add_parser(
        "mark-tools",
        help="Apply name corrections and set IsArchipelagoTool in the source CSV",
        parents=[p_common_paths],
    )
    p_tools.add_argument(
        "--source",
        type=Path,
        help="Source CSV to update in place (default: data/Archipelago_Master_Game_List.csv)",
    )
    p_tools.add_argument(
        "--overrides",
        type=Path,
        help="YAML with extra 'tools' and 'corrections' (optional)",
    )
    p_tools.add_argument(
        "--backup",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Copy the CSV to <name>.backup before rewriting (default: true)",
    )
    _add_logging_args(p_tools)
    p_tools.set_defaults(_fn=_command_mark_tools)

    p_prune = sub.add_parser(
        "prune-cache",
        help="Remove enrichment cache entries by outcome so the next build fetches them again",
        parents=[p_common_paths],
    )
    p_prune.add_argument(
        "--cache", type=Path, help="Enrichment cache JSON (default: data/enrichment-cache.json)"
    )
    p_prune.add_argument(
        "--outcome",
        type=str,
        default="error",
        help=f"Comma-separated outcomes to remove: {', '.join(OUTCOMES)} (default: error)",
    )
    _add_logging_args(p_prune)
    p_prune.set_defaults(_fn=_command_prune_cache)

    ns = parser.parse_args(argv)
    ns._fn(ns)
    return


if __name__ == "__main__":
    main()
