"""Tests for per-team win rates from the result files."""

from __future__ import annotations

import pytest

from domain.common import MatchEntry, MatchResultRecord, Phase, PlayerResult, Team
from domain.win_rates import get_team_win_rates, resolve_match_races
from replays.keys import ReplayKey


def _entry(
    race1: str,
    race2: str,
    score1: int,
    score2: int,
    *,
    tiers: tuple[int | None, int | None] = (1, 1),
    walkover: bool = False,
) -> MatchEntry:
    return MatchEntry(
        player1=PlayerResult(name="PlayerA", race=race1, score=score1, tier=tiers[0]),
        player2=PlayerResult(name="PlayerB", race=race2, score=score2, tier=tiers[1]),
        walkover=walkover,
        inactive_players=("PlayerB",) if walkover else (),
    )


class _RecordingResolver:
    def __init__(self, race: str) -> None:
        self.race = race
        self.calls: list[tuple[str, ReplayKey]] = []

    def __call__(self, known_race: str, key: ReplayKey) -> str:
        self.calls.append((known_race, key))
        return self.race


def _unused_key() -> ReplayKey:
    raise AssertionError("the replay key should not be needed")


def test_known_races_do_not_touch_the_replays() -> None:
    resolver = _RecordingResolver("P")
    assert resolve_match_races(_entry("Terran", "Zerg", 2, 0), _unused_key, resolver) == ("T", "Z")
    assert resolver.calls == []


def test_one_race_picker_is_resolved_from_the_replay() -> None:
    resolver = _RecordingResolver("P")
    key = ReplayKey(season=8, phase=Phase.REGULAR, week=1, teams=("Alpha", "Beta"), tier=1, players=("a", "b"))

    assert resolve_match_races(_entry("Race Picker", "Zerg", 2, 0), lambda: key, resolver) == ("P", "Z")
    assert resolver.calls == [("Z", key)]


def test_two_race_pickers_are_unresolved() -> None:
    resolver = _RecordingResolver("P")
    assert resolve_match_races(_entry("Race Picker", "", 2, 0), _unused_key, resolver) is None
    assert resolver.calls == []


def test_team_win_rates_by_ordered_race_pair() -> None:
    results = {
        Phase.REGULAR: {
            1: [
                MatchResultRecord(
                    team1="Alpha",
                    team2="Beta",
                    matches=(
                        _entry("T", "Z", 2, 1),
                        _entry("P", "T", 0, 2),
                        _entry("Z", "Z", 1, 1),
                        _entry("T", "P", 0, 0, walkover=True),
                    ),
                )
            ],
            2: [
                MatchResultRecord(
                    team1="Gamma",
                    team2="Alpha",
                    matches=(_entry("Z", "T", 2, 0),),
                )
            ],
        },
        Phase.PLAYOFFS: {
            1: [
                MatchResultRecord(
                    team1="Beta",
                    team2="Alpha",
                    matches=(_entry("Race Picker", "T", 1, 2, tiers=(2, 0)),),
                )
            ],
        },
    }
    resolver = _RecordingResolver("Z")

    rates = get_team_win_rates(Team(name="Alpha"), results, 8, resolver)

    assert (rates.games.played, rates.games.won) == (4, 2)
    assert (rates.maps.played, rates.maps.won) == (10, 4)
    assert (rates.matchups["TvZ"].played, rates.matchups["TvZ"].won) == (3, 2)
    assert (rates.matchups["PvT"].played, rates.matchups["PvT"].won) == (1, 0)
    assert rates.matchups["ZvZ"].played == 0
    assert rates.matchups["TvP"].played == 0

    ((known_race, key),) = resolver.calls
    assert known_race == "T"
    assert key.phase is Phase.PLAYOFFS
    assert key.tier == 0
    assert key.teams == ("Beta", "Alpha")


def test_results_are_matched_by_full_team_name_only() -> None:
    results = {
        Phase.REGULAR: {
            1: [
                MatchResultRecord(team1="Alpha", team2="Beta", matches=(_entry("T", "Z", 2, 0),)),
                MatchResultRecord(team1="ALP", team2="Gamma", matches=(_entry("T", "Z", 2, 0),)),
            ],
        },
    }
    team = Team(name="Alpha", title_aliases=("ALP",), use_alias_in_results=True)

    rates = get_team_win_rates(team, results, 8, _RecordingResolver("P"))
    assert (rates.games.played, rates.games.won) == (1, 1)


def test_race_picker_without_tiers_raises() -> None:
    results = {
        Phase.REGULAR: {
            1: [
                MatchResultRecord(
                    team1="Alpha",
                    team2="Beta",
                    matches=(_entry("Race Picker", "T", 2, 0, tiers=(None, None)),),
                )
            ],
        },
    }
    with pytest.raises(ValueError, match="has no player tier"):
        get_team_win_rates(Team(name="Alpha"), results, 8, _RecordingResolver("Z"))
