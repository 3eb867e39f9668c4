#!/usr/bin/env python3
"""Import a season's JSON replay cache into the SQL replay cache."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated

import typer

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from db import create_db_engine, create_session_factory
from domain.config import load_analysis_config
from replays.cache import JsonReplayCache, season_namespace
from repositories.replay_cache_repository import (
    count_replay_cache_entries,
    ensure_replay_cache_schema,
    insert_replay_cache_entries,
)

DEFAULT_CONFIG_PATH = ROOT_DIR / "configs" / "analysis.toml"
DEFAULT_CACHE_URL = f"sqlite:///{ROOT_DIR / 'data' / 'cache' / 'replays.db'}"

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Replay cache jobs.",
)


@app.command("import")
def import_replay_cache(
    season: Annotated[int, typer.Option("--season", help="Season number, e.g. 8.")],
    config_path: Annotated[
        Path,
        typer.Option("--config", help="Analysis TOML config."),
    ] = DEFAULT_CONFIG_PATH,
    json_file: Annotated[
        Path | None,
        typer.Option("--json-file", help="JSON cache to import. Defaults to the season's cache file."),
    ] = None,
    cache_url: Annotated[
        str | None,
        typer.Option("--cache-url", help="Target database URL. Defaults to the config value."),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Count the entries without writing them."),
    ] = False,
) -> None:
    """Copy entries that are not in the SQL cache yet; existing rows are kept."""
    if season <= 0:
        raise typer.BadParameter("--season must be greater than 0")

    config = load_analysis_config(config_path)
    source_path = json_file or config.replay_cache_file(season)
    if not source_path.is_file():
        raise typer.BadParameter(f"JSON cache not found: {source_path}", param_hint="--json-file")

    source = JsonReplayCache(source_path)
    entries = source.entries
    namespace = season_namespace(season)
    replays = sum(1 for payload in entries.values() if payload is not None)

    if dry_run:
        typer.echo(
            f"[dry-run] source={source_path} namespace={namespace} "
            f"entries={len(entries)} replays={replays} non_replays={len(entries) - replays}"
        )
        return

    engine = create_db_engine(cache_url or config.cache_url or DEFAULT_CACHE_URL)
    ensure_replay_cache_schema(engine)
    session_factory = create_session_factory(engine)

    with session_factory() as session:
        with session.begin():
            inserted = insert_replay_cache_entries(session, namespace, entries)
        total = count_replay_cache_entries(session, namespace)

    typer.echo(
        "completed "
        f"source={source_path} namespace={namespace} "
        f"entries={len(entries)} inserted_entries={inserted} cached_entries={total}"
    )


if __name__ == "__main__":
    app()
