"""Composite key joining a match result to its replay directory."""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import PurePosixPath

from domain.common import Phase

PAIR_SEPARATOR = "_vs_"

_WEEK_PATTERN = re.compile(r"^week([0-9]+)$")
_TIER_PATTERN = re.compile(r"^tier([0-9]+)$")


def split_pair(segment: str) -> tuple[str, str]:
    """Split an `A_vs_B` directory name."""
    parts = segment.split(PAIR_SEPARATOR)
    if len(parts) != 2 or not all(parts):
        raise ValueError(f"expected a '<a>{PAIR_SEPARATOR}<b>' directory name, got {segment!r}")
    return (parts[0], parts[1])


def parse_week(segment: str) -> int:
    match = _WEEK_PATTERN.match(segment)
    if match is None:
        raise ValueError(f"expected a 'week<N>' directory name, got {segment!r}")
    return int(match.group(1))


def parse_tier(segment: str) -> int:
    match = _TIER_PATTERN.match(segment)
    if match is None:
        raise ValueError(f"expected a 'tier<N>' directory name, got {segment!r}")
    return int(match.group(1))


@dataclass(frozen=True)
class ReplayKey:
    """Season, phase, week, team pair, tier and player pair of one match.

    Team names are full team names as used in the result files and on disk.
    """

    season: int
    phase: Phase
    week: int
    teams: tuple[str, str]
    tier: int
    players: tuple[str, str]

    def __post_init__(self) -> None:
        if self.week <= 0:
            raise ValueError(f"week must be > 0, got {self.week}")
        if self.tier < 0:
            raise ValueError(f"tier must be >= 0, got {self.tier}")
        for label, pair in (("teams", self.teams), ("players", self.players)):
            if len(pair) != 2 or not all(pair):
                raise ValueError(f"{label} must be a pair of non-empty names, got {pair!r}")
            if any(PAIR_SEPARATOR in name for name in pair):
                raise ValueError(f"{label} may not contain {PAIR_SEPARATOR!r}: {pair!r}")

    @property
    def relative_dir(self) -> PurePosixPath:
        """Player-pair directory relative to the season's replay root."""
        return PurePosixPath(
            self.phase.value,
            f"week{self.week}",
            PAIR_SEPARATOR.join(self.teams),
            f"tier{self.tier}",
            PAIR_SEPARATOR.join(self.players),
        )

    def variants(self) -> Iterator[ReplayKey]:
        """This key with either pair in either order; the key itself comes first."""
        for teams in (self.teams, self.teams[::-1]):
            for players in (self.players, self.players[::-1]):
                yield ReplayKey(
                    season=self.season,
                    phase=self.phase,
                    week=self.week,
                    teams=teams,
                    tier=self.tier,
                    players=players,
                )

    @classmethod
    def parse(cls, season: int, relative_dir: str | PurePosixPath) -> ReplayKey:
        """Build a key from a player-pair directory (or a replay inside one)."""
        parts = PurePosixPath(relative_dir).parts
        if parts and parts[-1].endswith(".rep"):
            parts = parts[:-1]
        if len(parts) != 5:
            raise ValueError(
                "expected '<phase>/week<N>/<teamA>_vs_<teamB>/tier<T>/<playerA>_vs_<playerB>', "
                f"got {str(relative_dir)!r}"
            )
        phase_segment, week_segment, teams_segment, tier_segment, players_segment = parts
        return cls(
            season=season,
            phase=Phase(phase_segment),
            week=parse_week(week_segment),
            teams=split_pair(teams_segment),
            tier=parse_tier(tier_segment),
            players=split_pair(players_segment),
        )


__all__ = [
    "PAIR_SEPARATOR",
    "ReplayKey",
    "parse_tier",
    "parse_week",
    "split_pair",
]
