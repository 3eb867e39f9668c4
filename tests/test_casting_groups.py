"""Tests for the casting group overview."""

from __future__ import annotations

from domain.casting_groups import (
    filter_uncast,
    format_casting_groups,
    format_playtime,
    format_races,
    format_static_sections,
)
from domain.common import CastGroupStatus, Phase
from replays.index import MatchupInfo, PlayerMatchup, TeamMatchupGroup, TierGroup
from replays.keys import ReplayKey


def _matchup(tier: int, players: tuple[str, str], race_matchup: str, duration_ms: int) -> PlayerMatchup:
    key = ReplayKey(season=8, phase=Phase.REGULAR, week=1, teams=("Alpha", "Beta"), tier=tier, players=players)
    info = MatchupInfo(
        replays=(),
        duration_ms=duration_ms,
        race_matchup=race_matchup,
        earliest_start=None,
        latest_start=None,
    )
    return PlayerMatchup(key=key, info=info)


def _group() -> TeamMatchupGroup:
    tier1 = TierGroup(
        tier=1,
        matchups=(
            _matchup(1, ("a", "b"), "TvZ", 900_000),
            _matchup(1, ("c", "d"), "TvZ", 1_800_000),
        ),
        cast_status=CastGroupStatus(was_cast=True),
    )
    tier2 = TierGroup(
        tier=2,
        matchups=(_matchup(2, ("e", "f"), "PvP", 600_000),),
        cast_status=CastGroupStatus(was_cast=False),
    )
    return TeamMatchupGroup(
        phase=Phase.REGULAR,
        week=1,
        teams=("ALP", "BET"),
        team_names=("Alpha", "Beta"),
        tiers=(tier1, tier2),
    )


def test_format_playtime_omits_days_and_milliseconds() -> None:
    assert format_playtime(2_700_000) == "45:00"
    assert format_playtime(90_000_000) == "25:00:00"


def test_format_races() -> None:
    assert format_races({"TvZ": 2, "PvP": 1}) == "TvZ: 2, PvP: 1"
    assert format_races({}) == ""


def test_format_casting_groups() -> None:
    assert format_casting_groups([_group()]) == (
        "Week 1, **ALP** vs **BET**\n"
        "\n"
        "• **Tier 1** - playtime: 45:00, matchups: TvZ: 2 (cast)\n"
        "• **Tier 2** - playtime: 10:00, matchups: PvP: 1"
    )


def test_filter_uncast_drops_cast_tiers_and_empty_groups() -> None:
    (group,) = filter_uncast([_group()])
    assert [tier.tier for tier in group.tiers] == [2]

    cast_only = TeamMatchupGroup(
        phase=Phase.REGULAR,
        week=2,
        teams=("ALP", "BET"),
        team_names=("Alpha", "Beta"),
        tiers=(_group().tiers[0],),
    )
    assert filter_uncast([cast_only]) == []


def test_format_static_sections() -> None:
    info = MatchupInfo(replays=(), duration_ms=3_600_000, race_matchup=None, earliest_start=None, latest_start=None)
    assert format_static_sections({"allstars": info}) == "• **allstars** - playtime: 1:00:00, replays: 0"
