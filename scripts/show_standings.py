#!/usr/bin/env python3
"""Show the team standings of a CPL season from the week result files."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated

import typer

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from domain.common import Phase
from domain.config import load_analysis_config
from domain.formatting import format_percentage
from domain.pipeline import load_team_standings
from domain.results import TeamStanding
from repositories.season_repository import DataPaths, ResultRepository

DEFAULT_CONFIG_PATH = ROOT_DIR / "configs" / "analysis.toml"

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Team standings table.",
)


def _parse_phase(value: str) -> Phase:
    try:
        phase = Phase(value.lower())
    except ValueError as exc:
        raise typer.BadParameter(
            f"Unsupported phase '{value}'. Choose one of: regular, playoffs.",
            param_hint="--phase",
        ) from exc
    if phase is Phase.PRESEASON:
        raise typer.BadParameter("preseason has no team standings", param_hint="--phase")
    return phase


def _render_row(standing: TeamStanding, use_real_matches: bool) -> str:
    totals = standing.totals
    if use_real_matches:
        matches = f"{totals.real_matches_won:2d}/{totals.real_matches_played:<3d}"
        matches_p = format_percentage(totals.real_matches_won, totals.real_matches_played)
    else:
        matches = f"{totals.matches_won:2d}/{totals.matches_played:<3d}"
        matches_p = format_percentage(totals.matches_won, totals.matches_played)
    bracket = f" {standing.playoffs_bracket}" if standing.playoffs_bracket else ""
    return (
        f"{standing.n:2d}. {standing.name:<28} "
        f"weeks_won={totals.matchups_won:2d} drawn={totals.matchups_drawn:d} "
        f"matches={matches} ({matches_p:>7}) "
        f"maps={totals.maps_won:3d}/{totals.maps_played:<3d} "
        f"({format_percentage(totals.maps_won, totals.maps_played):>7}){bracket}"
    )


@app.command()
def show_standings(
    season: Annotated[int, typer.Option("--season", help="Season number, e.g. 8.")],
    phase: Annotated[
        str,
        typer.Option("--phase", help="regular or playoffs."),
    ] = Phase.REGULAR.value,
    config_path: Annotated[
        Path,
        typer.Option("--config", help="Analysis TOML config."),
    ] = DEFAULT_CONFIG_PATH,
    use_real_matches: Annotated[
        bool | None,
        typer.Option(
            "--use-real-matches/--all-matches",
            help="Rank by non-walkover match win rate. Defaults to the config value.",
        ),
    ] = None,
) -> None:
    """Print teams ranked by weeks won, match win rate and map win rate."""
    if season <= 0:
        raise typer.BadParameter("--season must be greater than 0")
    resolved_phase = _parse_phase(phase)

    config = load_analysis_config(config_path)
    real_matches = config.use_real_matches if use_real_matches is None else use_real_matches
    repository = ResultRepository(DataPaths(config.data_dir))
    standings = load_team_standings(
        repository,
        season,
        resolved_phase,
        use_real_matches=real_matches,
        warn=lambda message: typer.echo(f"warning: {message}", err=True),
    )

    if not standings:
        typer.echo(f"No results found for season={season} phase={resolved_phase.value}.")
        return

    typer.echo(
        f"season={season} phase={resolved_phase.value} "
        f"played_weeks={standings[0].played_weeks} use_real_matches={real_matches}"
    )
    for standing in standings:
        typer.echo(_render_row(standing, real_matches))


if __name__ == "__main__":
    app()
