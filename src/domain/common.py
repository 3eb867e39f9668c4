"""Shared record types for season results, replays and VODs."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Phase(str, Enum):
    """Section of a season that a week of results belongs to."""

    PRESEASON = "preseason"
    REGULAR = "regular"
    PLAYOFFS = "playoffs"

    @property
    def file_prefix(self) -> str:
        """Prefix of the week result files, e.g. `playoffs_week1_results.json`."""
        if self is Phase.REGULAR:
            return ""
        return f"{self.value}_"

    @property
    def section(self) -> str:
        if self is Phase.REGULAR:
            return "regular_season"
        return self.value


@dataclass(frozen=True)
class Team:
    name: str
    title_aliases: tuple[str, ...] = ()
    logo_image: str | None = None
    use_alias_in_results: bool = False

    @property
    def alias(self) -> str:
        """Key under which the team's statistics are tracked."""
        return self.title_aliases[0] if self.title_aliases else self.name


@dataclass(frozen=True)
class SeasonRecord:
    """Static season metadata (`static/info.json`)."""

    season_number: int
    teams: tuple[Team, ...]
    map_pools: Mapping[int, tuple[str, ...]] = field(default_factory=dict)
    week_dates: Mapping[int, str] = field(default_factory=dict)
    playoffs_results: tuple[tuple[str, ...], ...] = ()

    def team_by_alias(self, alias: str) -> Team:
        for team in self.teams:
            if alias in team.title_aliases:
                return team
        for team in self.teams:
            if team.name == alias:
                return team
        raise KeyError(f"season {self.season_number} has no team with alias {alias!r}")

    def team_by_name(self, name: str) -> Team:
        for team in self.teams:
            if team.name == name:
                return team
        raise KeyError(f"season {self.season_number} has no team named {name!r}")


@dataclass(frozen=True)
class SeasonMiscData:
    """Free-form per-team extras (`static/misc.json`)."""

    most_improved_players: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PlayerResult:
    name: str
    race: str
    score: int
    tier: int | None = None


@dataclass(frozen=True)
class MatchEntry:
    player1: PlayerResult
    player2: PlayerResult
    walkover: bool = False
    inactive_players: tuple[str, ...] = ()

    @property
    def players(self) -> tuple[PlayerResult, PlayerResult]:
        return (self.player1, self.player2)


@dataclass(frozen=True)
class MatchResultRecord:
    """One scheduled matchup between two teams in a given week."""

    team1: str
    team2: str
    matches: tuple[MatchEntry, ...]

    @property
    def teams(self) -> tuple[str, str]:
        return (self.team1, self.team2)


@dataclass(frozen=True)
class ReplayPlayer:
    name: str
    race: str
    apm: int
    eapm: int
    is_observer: bool = False


@dataclass(frozen=True)
class ReplayTeam:
    index: int
    is_winner: bool
    players: tuple[ReplayPlayer, ...]

    @property
    def primary_player(self) -> ReplayPlayer:
        for player in self.players:
            if not player.is_observer:
                return player
        raise ValueError(f"replay team {self.index} has no active players")


@dataclass(frozen=True)
class ReplayRecord:
    """Data extracted from one replay file."""

    filename: str
    frames: int
    duration_ms: int
    map_name: str
    game_type: str
    teams: tuple[ReplayTeam, ...]
    start_time: str | None = None

    @property
    def winning_team(self) -> ReplayTeam | None:
        return next((team for team in self.teams if team.is_winner), None)

    @property
    def losing_team(self) -> ReplayTeam | None:
        return next((team for team in self.teams if not team.is_winner), None)

    @property
    def races(self) -> tuple[str, ...]:
        return tuple(team.primary_player.race for team in self.teams)

    @property
    def matchup_summary(self) -> str:
        """Races in team order, e.g. `ZvT`."""
        return "v".join(self.races)

    def to_dict(self) -> dict[str, Any]:
        return {
            "filename": self.filename,
            "frames": self.frames,
            "durationMs": self.duration_ms,
            "mapName": self.map_name,
            "gameType": self.game_type,
            "startTime": self.start_time,
            "teams": [
                {
                    "index": team.index,
                    "isWinner": team.is_winner,
                    "players": [
                        {
                            "name": player.name,
                            "race": player.race,
                            "apm": player.apm,
                            "eapm": player.eapm,
                            "isObserver": player.is_observer,
                        }
                        for player in team.players
                    ],
                }
                for team in self.teams
            ],
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> ReplayRecord:
        return cls(
            filename=str(raw["filename"]),
            frames=int(raw["frames"]),
            duration_ms=int(raw["durationMs"]),
            map_name=str(raw["mapName"]),
            game_type=str(raw["gameType"]),
            start_time=raw.get("startTime"),
            teams=tuple(
                ReplayTeam(
                    index=int(team["index"]),
                    is_winner=bool(team["isWinner"]),
                    players=tuple(
                        ReplayPlayer(
                            name=str(player["name"]),
                            race=str(player["race"]),
                            apm=int(player["apm"]),
                            eapm=int(player["eapm"]),
                            is_observer=bool(player.get("isObserver", False)),
                        )
                        for player in team["players"]
                    ),
                )
                for team in raw["teams"]
            ),
        )


@dataclass(frozen=True)
class VodMeta:
    season: int | None = None
    week: int | None = None
    tiers: tuple[int, ...] = ()
    team_matchup: tuple[str, ...] = ()
    groups: tuple[tuple[int, int], ...] = ()
    casters: tuple[str, ...] = ()
    is_preseason: bool = False
    is_showmatch: bool = False
    is_hype_video: bool = False
    is_motw: bool = False

    def as_match_fields(self) -> dict[str, Any]:
        """Field values under the keys used in `vods.json`."""
        return {
            "season": self.season,
            "week": self.week,
            "tiers": list(self.tiers),
            "teamMatchup": list(self.team_matchup),
            "isPreseason": self.is_preseason,
            "isShowmatch": self.is_showmatch,
            "isHypeVideo": self.is_hype_video,
            "isMOTW": self.is_motw,
        }


@dataclass(frozen=True)
class VodRecord:
    url: str
    meta: VodMeta
    title: str | None = None
    length_seconds: int | None = None


@dataclass(frozen=True)
class CastGroupStatus:
    was_cast: bool
    vods: tuple[VodRecord, ...] = ()


@dataclass(frozen=True)
class CastingSection:
    """A top-level directory of a season's replays.

    Weekly sections (`regular`, `playoffs`) are structured by week, team pair
    and tier; every other section is tallied as one static group.
    """

    name: str
    weekly: bool
    meta_match: Mapping[str, Any] = field(default_factory=dict)

    @property
    def phase(self) -> Phase | None:
        try:
            return Phase(self.name)
        except ValueError:
            return None


__all__ = [
    "CastGroupStatus",
    "CastingSection",
    "MatchEntry",
    "MatchResultRecord",
    "Phase",
    "PlayerResult",
    "ReplayPlayer",
    "ReplayRecord",
    "ReplayTeam",
    "SeasonMiscData",
    "SeasonRecord",
    "Team",
    "VodMeta",
    "VodRecord",
]
