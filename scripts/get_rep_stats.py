#!/usr/bin/env python3
"""Print the casting groups of a CPL season with their playtime and matchups."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated

import typer

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from domain.config import load_analysis_config
from domain.pipeline import build_replay_index, run_casting_groups
from repositories.season_repository import DataPaths, ResultRepository

DEFAULT_CONFIG_PATH = ROOT_DIR / "configs" / "analysis.toml"

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Casting group overview.",
)


@app.command("groups")
def casting_groups(
    season: Annotated[int, typer.Option("--season", help="Season number, e.g. 8.")],
    config_path: Annotated[
        Path,
        typer.Option("--config", help="Analysis TOML config."),
    ] = DEFAULT_CONFIG_PATH,
    cache_url: Annotated[
        str | None,
        typer.Option("--cache-url", help="Database URL of the replay cache."),
    ] = None,
    only_uncast: Annotated[
        bool,
        typer.Option("--only-uncast", help="List only tiers without a published VOD."),
    ] = False,
) -> None:
    """Print one Markdown block per week and team matchup."""
    if season <= 0:
        raise typer.BadParameter("--season must be greater than 0")

    config = load_analysis_config(config_path)
    repository = ResultRepository(DataPaths(config.data_dir))
    replay_index = build_replay_index(
        config,
        season,
        cache_url=cache_url,
        echo=lambda line: typer.echo(line, err=True),
    )
    overview = run_casting_groups(
        repository=repository,
        season=season,
        replay_index=replay_index,
        only_uncast=only_uncast,
    )
    if not overview:
        typer.echo(f"No casting groups found for season={season}.")
        return
    typer.echo(overview)


if __name__ == "__main__":
    app()
