"""Small running-statistics value objects composed into the stats buckets."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from domain.formatting import (
    floor_average,
    format_percentage,
    median,
    ms_to_duration,
    rounded_average,
)
from domain.races import ACTIVE_MATCHUPS, ALL_MATCHUPS, RACES

TOP_VS_BOTTOM = "tvb"


@dataclass(frozen=True)
class GameInfo:
    """Identifies the game behind a shortest/longest record."""

    filename: str
    players: tuple[str, str]
    races: tuple[str, ...]
    tier: int
    week: int
    teams: tuple[str, str]
    section: str

    def as_dict(self) -> dict[str, Any]:
        return {
            "filename": self.filename,
            "players": list(self.players),
            "races": list(self.races),
            "tier": self.tier,
            "week": self.week,
            "teams": list(self.teams),
            "section": self.section,
        }


@dataclass(frozen=True)
class GameRecordEntry:
    duration_ms: int
    matchup: str
    info: GameInfo

    @property
    def duration(self) -> str:
        return ms_to_duration(self.duration_ms, omit_ms=True)


@dataclass(frozen=True)
class DurationSummary:
    """Finalised durations; every field is None when no game was recorded."""

    count: int = 0
    shortest: GameRecordEntry | None = None
    longest: GameRecordEntry | None = None
    average_ms: int | None = None
    median_ms: float | None = None

    @property
    def average(self) -> str | None:
        return None if self.average_ms is None else ms_to_duration(self.average_ms, omit_ms=True)

    @property
    def median(self) -> str | None:
        return None if self.median_ms is None else ms_to_duration(self.median_ms, omit_ms=True)


class DurationTracker:
    """Shortest, longest and the duration samples of a set of games.

    On equal durations the game seen last becomes the record.
    """

    def __init__(self) -> None:
        self.samples: list[int] = []
        self.shortest: GameRecordEntry | None = None
        self.longest: GameRecordEntry | None = None

    def add(self, duration_ms: int, matchup: str, info: GameInfo) -> None:
        entry = GameRecordEntry(duration_ms=duration_ms, matchup=matchup, info=info)
        if self.shortest is None or duration_ms <= self.shortest.duration_ms:
            self.shortest = entry
        if self.longest is None or duration_ms >= self.longest.duration_ms:
            self.longest = entry
        self.samples.append(duration_ms)

    def summary(self) -> DurationSummary:
        return DurationSummary(
            count=len(self.samples),
            shortest=self.shortest,
            longest=self.longest,
            average_ms=floor_average(self.samples),
            median_ms=median(self.samples),
        )


class APMTracker:
    """APM and EAPM samples, optionally split by race."""

    def __init__(self, *, per_race: bool = False) -> None:
        self.per_race = per_race
        self.apm: dict[str | None, list[int]] = {}
        self.eapm: dict[str | None, list[int]] = {}
        if per_race:
            for race in RACES:
                self.apm[race] = []
                self.eapm[race] = []
        else:
            self.apm[None] = []
            self.eapm[None] = []

    def add(self, apm: int, eapm: int, race: str | None = None) -> None:
        key = race if self.per_race else None
        if key not in self.apm:
            raise ValueError(f"unknown race for APM tracking: {race!r}")
        self.apm[key].append(apm)
        self.eapm[key].append(eapm)

    def averages(self) -> tuple[Any, Any]:
        """Rounded averages; a race -> value dict for each when tracked per race."""
        if self.per_race:
            return (
                {race: rounded_average(values) for race, values in self.apm.items()},
                {race: rounded_average(values) for race, values in self.eapm.items()},
            )
        return rounded_average(self.apm[None]), rounded_average(self.eapm[None])


@dataclass(frozen=True)
class WinRate:
    played: int = 0
    won: int = 0

    @property
    def lost(self) -> int:
        return self.played - self.won

    @property
    def ratio(self) -> float | None:
        return self.won / self.played if self.played else None

    @property
    def percentage(self) -> str:
        return format_percentage(self.won, self.played)


class WinRateTracker:
    def __init__(self) -> None:
        self.played = 0
        self.won = 0

    def add(self, won: bool) -> None:
        self.played += 1
        if won:
            self.won += 1

    def snapshot(self) -> WinRate:
        return WinRate(played=self.played, won=self.won)


class MatchupWinTally:
    """Games played and won per unordered matchup.

    "Won" means won by the active race (the first race of the label). Mirror
    games count as played and as won, so their win rate carries no meaning.
    """

    def __init__(self) -> None:
        self.games_played = 0
        self.rates = {label: WinRateTracker() for label in ALL_MATCHUPS}

    def add(self, label: str, active_race_won: bool | None) -> None:
        first, second = label.split("v")
        is_mirror = first == second
        self.games_played += 1
        self.rates[label].add(is_mirror or bool(active_race_won))

    def snapshot(self) -> dict[str, WinRate]:
        return {label: tracker.snapshot() for label, tracker in self.rates.items()}

    def active_snapshot(self) -> dict[str, WinRate]:
        return {label: self.rates[label].snapshot() for label in ACTIVE_MATCHUPS}


@dataclass(frozen=True)
class GameTypeSummary:
    types: Mapping[str, int]

    @property
    def total(self) -> int:
        return sum(self.types.values())

    @property
    def tvb_percentage(self) -> str:
        return format_percentage(self.types.get(TOP_VS_BOTTOM, 0), self.total)


class GameTypeTally:
    def __init__(self) -> None:
        self.counts: dict[str, int] = {}

    def add(self, game_type: str) -> None:
        self.counts[game_type] = self.counts.get(game_type, 0) + 1

    def summary(self) -> GameTypeSummary:
        return GameTypeSummary(types=dict(self.counts))


@dataclass(frozen=True)
class CastCount:
    played: int = 0
    cast: int = 0

    @property
    def percentage(self) -> str:
        return format_percentage(self.cast, self.played)

    def as_dict(self) -> dict[str, Any]:
        return {"played": self.played, "cast": self.cast, "percentage": self.percentage}


class CastCounter:
    def __init__(self) -> None:
        self.played = 0
        self.cast = 0

    def add(self, was_cast: bool) -> None:
        self.played += 1
        if was_cast:
            self.cast += 1

    def snapshot(self) -> CastCount:
        return CastCount(played=self.played, cast=self.cast)


@dataclass(frozen=True)
class CastCoverageSummary:
    total: CastCount
    per_week: Mapping[int, CastCount] = field(default_factory=dict)
    per_tier: Mapping[int, CastCount] = field(default_factory=dict)


class CastCoverage:
    """Played and cast group counts, in total and per week and tier."""

    def __init__(self) -> None:
        self.total = CastCounter()
        self.per_week: dict[int, CastCounter] = {}
        self.per_tier: dict[int, CastCounter] = {}

    def add(self, week: int, tier: int, was_cast: bool) -> None:
        self.total.add(was_cast)
        self.per_week.setdefault(week, CastCounter()).add(was_cast)
        self.per_tier.setdefault(tier, CastCounter()).add(was_cast)

    def summary(self) -> CastCoverageSummary:
        return CastCoverageSummary(
            total=self.total.snapshot(),
            per_week={week: counter.snapshot() for week, counter in sorted(self.per_week.items())},
            per_tier={tier: counter.snapshot() for tier, counter in sorted(self.per_tier.items())},
        )


__all__ = [
    "APMTracker",
    "CastCount",
    "CastCounter",
    "CastCoverage",
    "CastCoverageSummary",
    "DurationSummary",
    "DurationTracker",
    "GameInfo",
    "GameRecordEntry",
    "GameTypeSummary",
    "GameTypeTally",
    "MatchupWinTally",
    "TOP_VS_BOTTOM",
    "WinRate",
    "WinRateTracker",
]
