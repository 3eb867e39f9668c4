"""Per-dimension statistics buckets.

Each bucket is mutated while the replays are fed in and finalised exactly
once into a frozen stats record; mutating a finalised bucket raises.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from domain.formatting import NOT_AVAILABLE, format_differential, format_percentage
from domain.races import RACES, is_mirror
from domain.trackers import (
    APMTracker,
    CastCount,
    CastCounter,
    CastCoverage,
    CastCoverageSummary,
    DurationSummary,
    DurationTracker,
    GameInfo,
    GameTypeSummary,
    GameTypeTally,
    MatchupWinTally,
    WinRate,
)


class _Bucket:
    def __init__(self) -> None:
        self._finalized = False

    @property
    def finalized(self) -> bool:
        return self._finalized

    def _check_open(self) -> None:
        if self._finalized:
            raise RuntimeError(f"{type(self).__name__} is already finalised")

    def _close(self) -> None:
        self._check_open()
        self._finalized = True


class _DurationBucket(_Bucket):
    def __init__(self) -> None:
        super().__init__()
        self.durations = DurationTracker()

    def add_duration(self, duration_ms: int, matchup: str, info: GameInfo) -> None:
        self._check_open()
        self.durations.add(duration_ms, matchup, info)


@dataclass(frozen=True)
class MatchupWinRate:
    played: int
    won: int
    win_rate: str
    relative_rate: str | None = None

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"played": self.played, "won": self.won, "winRate": self.win_rate}
        if self.relative_rate is not None:
            payload["relativeRate"] = self.relative_rate
        return payload


@dataclass(frozen=True)
class GeneralStats:
    durations: DurationSummary
    game_types: GameTypeSummary
    cast_coverage: CastCoverageSummary
    total_games: int


class GeneralBucket(_DurationBucket):
    def __init__(self) -> None:
        super().__init__()
        self.game_types = GameTypeTally()
        self.cast_coverage = CastCoverage()

    def add_game_type(self, game_type: str) -> None:
        self._check_open()
        self.game_types.add(game_type)

    def add_cast_group(self, week: int, tier: int, was_cast: bool) -> None:
        self._check_open()
        self.cast_coverage.add(week, tier, was_cast)

    def finalize(self, *, total_games: int) -> GeneralStats:
        self._close()
        return GeneralStats(
            durations=self.durations.summary(),
            game_types=self.game_types.summary(),
            cast_coverage=self.cast_coverage.summary(),
            total_games=total_games,
        )


@dataclass(frozen=True)
class TierStats:
    tier: int
    average_apm: Mapping[str, int | None]
    average_eapm: Mapping[str, int | None]
    durations: DurationSummary
    game_types: GameTypeSummary
    games_played: int
    win_rates: Mapping[str, MatchupWinRate]


class TierBucket(_DurationBucket):
    """Per-tier APM by race, game types and active-race win tallies."""

    def __init__(self, tier: int) -> None:
        super().__init__()
        self.tier = tier
        self.apm = APMTracker(per_race=True)
        self.game_types = GameTypeTally()
        self.matchup_wins = MatchupWinTally()

    def add_apm(self, apm: int, eapm: int, race: str) -> None:
        self._check_open()
        self.apm.add(apm, eapm, race)

    def add_game_type(self, game_type: str) -> None:
        self._check_open()
        self.game_types.add(game_type)

    def add_game(self, matchup: str, active_race_won: bool | None) -> None:
        self._check_open()
        self.matchup_wins.add(matchup, active_race_won)

    def finalize(self) -> TierStats:
        self._close()
        average_apm, average_eapm = self.apm.averages()
        return TierStats(
            tier=self.tier,
            average_apm=average_apm,
            average_eapm=average_eapm,
            durations=self.durations.summary(),
            game_types=self.game_types.summary(),
            games_played=self.matchup_wins.games_played,
            win_rates={
                label: MatchupWinRate(played=rate.played, won=rate.won, win_rate=rate.percentage)
                for label, rate in self.matchup_wins.active_snapshot().items()
            },
        )


@dataclass(frozen=True)
class MapStats:
    name: str
    games_played: int
    durations: DurationSummary
    win_rates: Mapping[str, MatchupWinRate]


class MapBucket(_DurationBucket):
    def __init__(self, name: str) -> None:
        super().__init__()
        self.name = name
        self.matchup_wins = MatchupWinTally()

    @property
    def games_played(self) -> int:
        return self.matchup_wins.games_played

    def add_game(self, matchup: str, active_race_won: bool | None) -> None:
        self._check_open()
        self.matchup_wins.add(matchup, active_race_won)

    def finalize(self, matchup_ratios: Mapping[str, float | None]) -> MapStats:
        """Finalise with each matchup's overall win ratio for the relative rates."""
        self._close()
        win_rates = {}
        for label, rate in self.matchup_wins.active_snapshot().items():
            overall = matchup_ratios.get(label)
            if overall is None or rate.ratio is None:
                relative = NOT_AVAILABLE
            else:
                relative = format_differential(overall, rate.ratio)
            win_rates[label] = MatchupWinRate(
                played=rate.played,
                won=rate.won,
                win_rate=rate.percentage,
                relative_rate=relative,
            )
        return MapStats(
            name=self.name,
            games_played=self.games_played,
            durations=self.durations.summary(),
            win_rates=win_rates,
        )


@dataclass(frozen=True)
class MatchupStats:
    label: str
    games_played: int
    games_won: int
    games_lost: int
    durations: DurationSummary

    @property
    def is_mirror(self) -> bool:
        return is_mirror(self.label)

    @property
    def ratio(self) -> float | None:
        if self.is_mirror or not self.games_played:
            return None
        return self.games_won / self.games_played

    @property
    def win_rate(self) -> str:
        if self.is_mirror:
            return NOT_AVAILABLE
        return format_percentage(self.games_won, self.games_played)


class MatchupBucket(_DurationBucket):
    """Games of one matchup; won and lost are from the active race's side."""

    def __init__(self, label: str) -> None:
        super().__init__()
        self.label = label
        self.games_played = 0
        self.games_won = 0
        self.games_lost = 0

    @property
    def is_mirror(self) -> bool:
        return is_mirror(self.label)

    def add_game(self, active_race_won: bool | None) -> None:
        self._check_open()
        self.games_played += 1
        if self.is_mirror:
            return
        if active_race_won:
            self.games_won += 1
        else:
            self.games_lost += 1

    def finalize(self) -> MatchupStats:
        self._close()
        return MatchupStats(
            label=self.label,
            games_played=self.games_played,
            games_won=self.games_won,
            games_lost=self.games_lost,
            durations=self.durations.summary(),
        )


@dataclass(frozen=True)
class RaceStats:
    race: str
    average_apm: int | None
    average_eapm: int | None
    games_played: int
    games_vs: Mapping[str, int]
    games_played_vs_other: int
    games_won_vs_other: int
    games_lost_vs_other: int

    @property
    def win_rate(self) -> str:
        return format_percentage(self.games_won_vs_other, self.games_played_vs_other)

    @property
    def mirror_rate(self) -> str:
        return format_percentage(self.games_vs[self.race], self.games_played)


class RaceBucket(_Bucket):
    def __init__(self, race: str) -> None:
        super().__init__()
        self.race = race
        self.apm = APMTracker()
        self.games_played = 0
        self.games_vs = {other: 0 for other in RACES}
        self.games_played_vs_other = 0
        self.games_won_vs_other = 0
        self.games_lost_vs_other = 0

    def add_apm(self, apm: int, eapm: int) -> None:
        self._check_open()
        self.apm.add(apm, eapm)

    def add_game(self, opponent_race: str) -> None:
        self._check_open()
        if opponent_race not in self.games_vs:
            raise ValueError(f"unknown opponent race: {opponent_race!r}")
        self.games_played += 1
        self.games_vs[opponent_race] += 1

    def add_result_vs_other(self, won: bool) -> None:
        self._check_open()
        self.games_played_vs_other += 1
        if won:
            self.games_won_vs_other += 1
        else:
            self.games_lost_vs_other += 1

    def finalize(self) -> RaceStats:
        self._close()
        average_apm, average_eapm = self.apm.averages()
        return RaceStats(
            race=self.race,
            average_apm=average_apm,
            average_eapm=average_eapm,
            games_played=self.games_played,
            games_vs=dict(self.games_vs),
            games_played_vs_other=self.games_played_vs_other,
            games_won_vs_other=self.games_won_vs_other,
            games_lost_vs_other=self.games_lost_vs_other,
        )


@dataclass(frozen=True)
class TeamWinRates:
    """A team's results from the result files, independent of replays."""

    games: WinRate = field(default_factory=WinRate)
    maps: WinRate = field(default_factory=WinRate)
    matchups: Mapping[str, WinRate] = field(default_factory=dict)


@dataclass(frozen=True)
class TeamStats:
    alias: str
    name: str
    durations: DurationSummary
    cast: CastCount
    win_rates: TeamWinRates
    most_improved_players: Any = None


class TeamBucket(_DurationBucket):
    def __init__(self, alias: str, name: str) -> None:
        super().__init__()
        self.alias = alias
        self.name = name
        self.cast = CastCounter()
        self.win_rates: TeamWinRates | None = None

    def add_cast_group(self, was_cast: bool) -> None:
        self._check_open()
        self.cast.add(was_cast)

    def set_win_rates(self, win_rates: TeamWinRates) -> None:
        self._check_open()
        self.win_rates = win_rates

    def finalize(self, *, most_improved_players: Any = None) -> TeamStats:
        self._close()
        return TeamStats(
            alias=self.alias,
            name=self.name,
            durations=self.durations.summary(),
            cast=self.cast.snapshot(),
            win_rates=self.win_rates or TeamWinRates(),
            most_improved_players=most_improved_players,
        )


__all__ = [
    "GeneralBucket",
    "GeneralStats",
    "MapBucket",
    "MapStats",
    "MatchupBucket",
    "MatchupStats",
    "MatchupWinRate",
    "RaceBucket",
    "RaceStats",
    "TeamBucket",
    "TeamStats",
    "TeamWinRates",
    "TierBucket",
    "TierStats",
]
