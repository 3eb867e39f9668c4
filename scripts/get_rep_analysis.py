#!/usr/bin/env python3
"""Compute the replay statistics report of a CPL season and print it as JSON."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Annotated

import typer

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from domain.config import load_analysis_config
from domain.pipeline import build_replay_index, run_replay_analysis
from repositories.season_repository import DataPaths, ResultRepository

DEFAULT_CONFIG_PATH = ROOT_DIR / "configs" / "analysis.toml"

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Replay statistics for a CPL season.",
)


def _warn(message: str) -> None:
    typer.echo(f"warning: {message}", err=True)


@app.command("analyze")
def analyze(
    season: Annotated[int, typer.Option("--season", help="Season number, e.g. 8.")],
    config_path: Annotated[
        Path,
        typer.Option("--config", help="Analysis TOML config."),
    ] = DEFAULT_CONFIG_PATH,
    cache_url: Annotated[
        str | None,
        typer.Option(
            "--cache-url",
            help="Database URL of the replay cache. Defaults to the JSON cache file.",
        ),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option("--output", help="Write the report to this file instead of stdout."),
    ] = None,
    use_real_matches: Annotated[
        bool | None,
        typer.Option(
            "--use-real-matches/--all-matches",
            help="Rank teams by non-walkover match win rate. Defaults to the config value.",
        ),
    ] = None,
) -> None:
    """Walk the season's replays and print the statistics tree."""
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
    summary = run_replay_analysis(
        repository=repository,
        config=config,
        season=season,
        replay_index=replay_index,
        use_real_matches=use_real_matches,
        echo=lambda line: typer.echo(line, err=True),
        warn=_warn,
    )

    payload = json.dumps(summary.report, indent=2, ensure_ascii=False)
    if output is None:
        typer.echo(payload)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(payload + "\n", encoding="utf-8")
    typer.echo(f"wrote report={output} season={season}", err=True)


if __name__ == "__main__":
    app()
