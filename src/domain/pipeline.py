"""Wire the repositories, replay index and accumulator for one report run."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from db import create_db_engine, create_session_factory
from domain.accumulator import collect_map_names, extract_team_stats, flatten_replays
from domain.cast_coverage import attach_cast_status
from domain.casting_groups import filter_uncast, format_casting_groups, format_static_sections
from domain.common import Phase
from domain.config import AnalysisConfig
from domain.report import organize_stats
from domain.results import TeamStanding, get_all_week_results, organize_team_standings
from replays.cache import JsonReplayCache, ReplayCache, SqlReplayCache, season_namespace
from replays.index import ReplayIndex, TeamMatchupGroup, get_casting_sections
from replays.keys import ReplayKey
from replays.parser import ReplayParser, ScrepParser
from repositories.replay_cache_repository import ensure_replay_cache_schema
from repositories.season_repository import ResultRepository


@dataclass(frozen=True)
class AnalysisSummary:
    """Outcome of one analysis run."""

    season: int
    report: dict[str, Any]
    processed_replays: int
    cache_hits: int
    cache_misses: int
    flushed_entries: int
    known_winner: int
    unknown_winner: int


def open_replay_cache(
    config: AnalysisConfig,
    season: int,
    *,
    cache_url: str | None = None,
) -> ReplayCache:
    """SQL cache when a database URL is configured, the JSON file cache otherwise."""
    url = cache_url or config.cache_url
    if url is None:
        return JsonReplayCache(config.replay_cache_file(season))

    engine = create_db_engine(url)
    ensure_replay_cache_schema(engine)
    return SqlReplayCache(create_session_factory(engine), season_namespace(season))


def build_replay_index(
    config: AnalysisConfig,
    season: int,
    *,
    cache_url: str | None = None,
    parser: ReplayParser | None = None,
    echo: Callable[[str], None] | None = None,
) -> ReplayIndex:
    return ReplayIndex(
        parser or ScrepParser(config.screp_path, frame_ms=config.frame_ms),
        open_replay_cache(config, season, cache_url=cache_url),
        echo=echo,
    )


def load_team_standings(
    repository: ResultRepository,
    season: int,
    phase: Phase,
    *,
    use_real_matches: bool = False,
    warn: Callable[[str], None] | None = None,
) -> list[TeamStanding]:
    season_data = repository.get_season_data(season)
    totals, weeks_played = get_all_week_results(repository, season, phase, warn=warn)
    if not totals:
        return []
    return organize_team_standings(
        totals,
        weeks_played,
        season_data,
        use_real_matches=use_real_matches,
        phase=phase,
    )


def walk_cast_groups(
    repository: ResultRepository,
    season: int,
    replay_index: ReplayIndex,
) -> list[TeamMatchupGroup]:
    """Walk the season's replays and mark the tiers covered by a VOD."""
    season_data = repository.get_season_data(season)
    root_path = repository.paths.replays(season)
    groups = replay_index.walk_season(season_data, root_path)
    return attach_cast_status(
        groups,
        get_casting_sections(root_path),
        repository.get_vods(season),
        season_data,
    )


def run_replay_analysis(
    *,
    repository: ResultRepository,
    config: AnalysisConfig,
    season: int,
    replay_index: ReplayIndex,
    use_real_matches: bool | None = None,
    echo: Callable[[str], None] | None = None,
    warn: Callable[[str], None] | None = None,
) -> AnalysisSummary:
    """Produce the statistics tree for a season."""
    real_matches = config.use_real_matches if use_real_matches is None else use_real_matches
    season_data = repository.get_season_data(season)
    misc = repository.get_season_misc_data(season)
    root_path = repository.paths.replays(season)

    standings_regular = load_team_standings(
        repository, season, Phase.REGULAR, use_real_matches=real_matches, warn=warn
    )
    standings_playoffs = load_team_standings(
        repository, season, Phase.PLAYOFFS, use_real_matches=real_matches, warn=warn
    )

    def resolve_race(known_race: str, key: ReplayKey) -> str:
        return replay_index.resolve_unknown_race(known_race, key, root_path)

    try:
        groups = walk_cast_groups(repository, season, replay_index)
        replays = flatten_replays(groups)
        stats = extract_team_stats(
            season_data,
            misc,
            groups,
            replays,
            collect_map_names(replays, config.map_aliases),
            repository.get_all_week_results(season),
            config=config,
            race_resolver=resolve_race,
        )
    finally:
        flushed_entries = replay_index.flush()

    if echo is not None:
        echo(
            "completed "
            f"season={season} "
            f"processed_replays={replay_index.processed_replays} "
            f"cache_hits={replay_index.cache_hits} "
            f"cache_misses={replay_index.cache_misses} "
            f"flushed_entries={flushed_entries} "
            f"known_winner={stats.match_status.known_winner} "
            f"unknown_winner={stats.match_status.unknown_winner}"
        )

    return AnalysisSummary(
        season=season,
        report=organize_stats(stats, standings_regular, standings_playoffs),
        processed_replays=replay_index.processed_replays,
        cache_hits=replay_index.cache_hits,
        cache_misses=replay_index.cache_misses,
        flushed_entries=flushed_entries,
        known_winner=stats.match_status.known_winner,
        unknown_winner=stats.match_status.unknown_winner,
    )


def run_casting_groups(
    *,
    repository: ResultRepository,
    season: int,
    replay_index: ReplayIndex,
    only_uncast: bool = False,
) -> str:
    """Markdown overview of every casting group of a season."""
    root_path = repository.paths.replays(season)
    try:
        groups = walk_cast_groups(repository, season, replay_index)
        static_sections = {
            section.name: replay_index.get_static_section_info(root_path / section.name, root_path)
            for section in get_casting_sections(root_path)
            if not section.weekly
        }
    finally:
        replay_index.flush()

    if only_uncast:
        groups = filter_uncast(groups)
    parts = [format_casting_groups(groups)]
    if static_sections and not only_uncast:
        parts.append(format_static_sections(static_sections))
    return "\n\n".join(part for part in parts if part)


__all__ = [
    "AnalysisSummary",
    "build_replay_index",
    "load_team_standings",
    "open_replay_cache",
    "run_casting_groups",
    "run_replay_analysis",
    "walk_cast_groups",
]
