"""Read season metadata, week results and VOD records from the data directory."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from domain.common import (
    MatchEntry,
    MatchResultRecord,
    Phase,
    PlayerResult,
    SeasonMiscData,
    SeasonRecord,
    Team,
    VodMeta,
    VodRecord,
)

_WEEK_FILE_PATTERN = re.compile(r"week([0-9]+)_results\.json$")


@dataclass(frozen=True)
class DataPaths:
    """File layout of the league data directory."""

    data_dir: Path

    def season_base(self, season: int) -> Path:
        return self.data_dir / f"s{season}"

    def season_data(self, season: int) -> Path:
        return self.season_base(season) / "static" / "info.json"

    def season_misc_data(self, season: int) -> Path:
        return self.season_base(season) / "static" / "misc.json"

    def week_results(self, season: int, week: int, phase: Phase = Phase.REGULAR) -> Path:
        return self.season_base(season) / f"{phase.file_prefix}week{week}_results.json"

    def season_vods(self, season: int) -> Path:
        return self.season_base(season) / "vods.json"

    def replays(self, season: int) -> Path:
        return self.season_base(season) / "replays"


class ResultRepository:
    """Loads and indexes the JSON documents of one data directory."""

    def __init__(self, paths: DataPaths) -> None:
        self.paths = paths

    def get_season_data(self, season: int) -> SeasonRecord:
        return parse_season_record(_read_json(self.paths.season_data(season)), season)

    def get_season_misc_data(self, season: int) -> SeasonMiscData:
        path = self.paths.season_misc_data(season)
        if not path.exists():
            return SeasonMiscData()
        raw = _read_json(path)
        teams_raw = raw.get("teams", {}) if isinstance(raw, dict) else {}
        return SeasonMiscData(
            most_improved_players={
                str(alias): data.get("mostImprovedPlayers")
                for alias, data in teams_raw.items()
                if isinstance(data, dict)
            }
        )

    def get_played_weeks(self, season: int, phase: Phase = Phase.REGULAR) -> int:
        """Count the week result files present for a phase."""
        base = self.paths.season_base(season)
        if not base.is_dir():
            return 0
        pattern = f"{phase.file_prefix}week*_results.json"
        return sum(1 for path in base.glob(pattern) if _WEEK_FILE_PATTERN.search(path.name))

    def get_week_results(
        self,
        season: int,
        week: int,
        phase: Phase = Phase.REGULAR,
    ) -> list[MatchResultRecord]:
        path = self.paths.week_results(season, week, phase)
        raw = _read_json(path)
        if not isinstance(raw, list):
            raise ValueError(f"{path}: expected a list of team matchups")
        return [parse_match_result(item, path) for item in raw]

    def get_all_week_results_for_phase(
        self,
        season: int,
        phase: Phase = Phase.REGULAR,
    ) -> dict[int, list[MatchResultRecord]]:
        weeks_played = self.get_played_weeks(season, phase)
        return {
            week: self.get_week_results(season, week, phase)
            for week in range(1, weeks_played + 1)
        }

    def get_all_week_results(self, season: int) -> dict[Phase, dict[int, list[MatchResultRecord]]]:
        return {
            Phase.REGULAR: self.get_all_week_results_for_phase(season, Phase.REGULAR),
            Phase.PLAYOFFS: self.get_all_week_results_for_phase(season, Phase.PLAYOFFS),
        }

    def get_vods(self, season: int) -> list[VodRecord]:
        path = self.paths.season_vods(season)
        if not path.exists():
            return []
        raw = _read_json(path)
        if not isinstance(raw, list):
            raise ValueError(f"{path}: expected a list of VOD records")
        return [parse_vod_record(item) for item in raw]


def parse_season_record(raw: dict[str, Any], season: int) -> SeasonRecord:
    regular_raw = raw.get("regularSeason", {})
    playoffs_raw = raw.get("playoffs", {})
    teams = tuple(
        Team(
            name=str(team["name"]),
            title_aliases=tuple(str(alias) for alias in team.get("titleAliases", [])),
            logo_image=team.get("tlLogoImage"),
            use_alias_in_results=bool(team.get("useAliasInResults", False)),
        )
        for team in raw.get("teams", [])
    )
    return SeasonRecord(
        season_number=int(raw.get("seasonNumber", season)),
        teams=teams,
        map_pools={
            int(week): tuple(str(name) for name in maps)
            for week, maps in regular_raw.get("mapPool", {}).items()
        },
        week_dates={int(week): str(date) for week, date in regular_raw.get("weeks", {}).items()},
        playoffs_results=tuple(
            tuple(str(alias) for alias in result_set)
            for result_set in playoffs_raw.get("results", [])
        ),
    )


def parse_match_result(raw: dict[str, Any], source: Path | str = "<memory>") -> MatchResultRecord:
    try:
        return MatchResultRecord(
            team1=str(raw["team1"]),
            team2=str(raw["team2"]),
            matches=tuple(
                MatchEntry(
                    player1=_parse_player(match["player1"]),
                    player2=_parse_player(match["player2"]),
                    walkover=bool(match.get("walkover", False)),
                    inactive_players=tuple(str(name) for name in match.get("inactive_players") or []),
                )
                for match in raw.get("matches", [])
            ),
        )
    except KeyError as exc:
        raise ValueError(f"{source}: match result is missing field {exc}") from exc


def _parse_player(raw: dict[str, Any]) -> PlayerResult:
    tier = raw.get("tier")
    return PlayerResult(
        name=str(raw["name"]),
        race=str(raw.get("race") or ""),
        score=int(raw.get("score") or 0),
        tier=None if tier is None else int(tier),
    )


def parse_vod_record(raw: dict[str, Any]) -> VodRecord:
    meta_raw = raw.get("meta") or {}
    length = raw.get("lengthSeconds", raw.get("length"))
    return VodRecord(
        url=str(raw["url"]),
        title=raw.get("title"),
        length_seconds=None if length is None else int(length),
        meta=VodMeta(
            season=_optional_int(meta_raw.get("season")),
            week=_optional_int(meta_raw.get("week")),
            tiers=tuple(int(tier) for tier in meta_raw.get("tiers") or []),
            team_matchup=tuple(str(team) for team in meta_raw.get("teamMatchup") or []),
            groups=tuple((int(week), int(group)) for week, group in meta_raw.get("groups") or []),
            casters=tuple(str(caster) for caster in meta_raw.get("casters") or []),
            is_preseason=bool(meta_raw.get("isPreseason", False)),
            is_showmatch=bool(meta_raw.get("isShowmatch", False)),
            is_hype_video=bool(meta_raw.get("isHypeVideo", False)),
            is_motw=bool(meta_raw.get("isMOTW", False)),
        ),
    )


def _optional_int(value: Any) -> int | None:
    return None if value is None else int(value)


def _read_json(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as file:
        return json.load(file)


__all__ = [
    "DataPaths",
    "ResultRepository",
    "parse_match_result",
    "parse_season_record",
    "parse_vod_record",
]
