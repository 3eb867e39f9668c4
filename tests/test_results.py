"""Tests for week results, walkovers and team standings."""

from __future__ import annotations

import pytest

from domain.common import MatchEntry, MatchResultRecord, Phase, PlayerResult, SeasonRecord, Team
from domain.results import (
    WalkoverError,
    get_all_week_results,
    get_walkover_winner,
    get_week_results,
    get_winner,
    organize_team_standings,
)


def _match(score1: int, score2: int, *, walkover: bool = False, inactive: tuple[str, ...] = ()) -> MatchEntry:
    return MatchEntry(
        player1=PlayerResult(name="PlayerA", race="T", score=score1, tier=1),
        player2=PlayerResult(name="PlayerB", race="Z", score=score2, tier=1),
        walkover=walkover,
        inactive_players=inactive,
    )


def _matchup(*matches: MatchEntry, team1: str = "Alpha", team2: str = "Beta") -> MatchResultRecord:
    return MatchResultRecord(team1=team1, team2=team2, matches=matches)


class _FakeResults:
    def __init__(self, weeks: dict[int, list[MatchResultRecord]]) -> None:
        self.weeks = weeks

    def get_played_weeks(self, season: int, phase: Phase = Phase.REGULAR) -> int:
        return len(self.weeks) if phase is Phase.REGULAR else 0

    def get_week_results(self, season: int, week: int, phase: Phase = Phase.REGULAR) -> list[MatchResultRecord]:
        return self.weeks[week]


def _season() -> SeasonRecord:
    return SeasonRecord(
        season_number=8,
        teams=(
            Team(name="Alpha", title_aliases=("ALP",)),
            Team(name="Beta", title_aliases=("BET",)),
        ),
        playoffs_results=(("ALP", "BET"),),
    )


def test_walkover_winner_is_the_active_player() -> None:
    match = _match(0, 0, walkover=True, inactive=("PlayerB",))
    assert get_walkover_winner(match.player1, match.player2, True, match.inactive_players) == "1"

    match = _match(0, 0, walkover=True, inactive=("PlayerA",))
    assert get_walkover_winner(match.player1, match.player2, True, match.inactive_players) == "2"


def test_walkover_winner_without_walkover_is_none() -> None:
    match = _match(2, 0)
    assert get_walkover_winner(match.player1, match.player2, False, ()) is None


def test_walkover_winner_raises_when_no_player_is_inactive() -> None:
    match = _match(0, 0, walkover=True, inactive=("Somebody",))
    with pytest.raises(WalkoverError, match="invalid value for walkover win"):
        get_walkover_winner(match.player1, match.player2, True, match.inactive_players)


def test_get_winner() -> None:
    assert get_winner(2, 0) == "1"
    assert get_winner(1, 2) == "2"
    assert get_winner(1, 1) == "0"
    assert get_winner(0, 0, "2") == "2"


def test_single_week_two_nil_totals() -> None:
    totals = get_week_results([_matchup(_match(2, 0))], season=8, week=1)

    alpha = totals["Alpha"]
    assert alpha.matches_played == 1
    assert alpha.matches_won == 1
    assert alpha.maps_won == 2
    assert alpha.maps_played == 2
    assert alpha.matchups_won == 1

    beta = totals["Beta"]
    assert beta.matches_won == 0
    assert beta.maps_won == 0
    assert beta.maps_played == 2
    assert beta.matchups_won == 0


def test_three_winning_weeks_are_merged() -> None:
    repository = _FakeResults({week: [_matchup(_match(2, 0))] for week in (1, 2, 3)})
    totals, weeks_played = get_all_week_results(repository, 8, Phase.REGULAR)

    assert weeks_played == 3
    assert totals["Alpha"].matchups_won == 3
    assert totals["Alpha"].maps_won == 6

    standings = organize_team_standings(totals, weeks_played, _season())
    assert [standing.name for standing in standings] == ["Alpha", "Beta"]
    assert standings[0].n == 1
    assert standings[0].played_weeks == 3
    assert standings[0].as_dict()["matchesWonP"] == "100.00%"


def test_walkover_counts_as_match_but_not_real_match() -> None:
    totals = get_week_results(
        [_matchup(_match(0, 0, walkover=True, inactive=("PlayerB",)), _match(0, 2))],
        season=8,
        week=1,
    )
    alpha = totals["Alpha"]
    assert alpha.matches_played == 2
    assert alpha.matches_won == 1
    assert alpha.real_matches_played == 1
    assert alpha.real_matches_won == 0
    # Equal match wins, Beta has more maps.
    assert totals["Beta"].matchups_won == 1


def test_unplayed_match_is_skipped() -> None:
    totals = get_week_results([_matchup(_match(0, 0), _match(2, 1))], season=8, week=1)
    assert totals["Alpha"].matches_played == 1
    assert totals["Alpha"].maps_played == 3


def test_double_tie_warns_and_records_a_draw() -> None:
    warnings: list[str] = []
    totals = get_week_results(
        [_matchup(_match(2, 1), _match(1, 2))],
        season=8,
        week=4,
        warn=warnings.append,
    )
    assert totals["Alpha"].matchups_drawn == 1
    assert totals["Beta"].matchups_drawn == 1
    assert totals["Alpha"].matchups_won == 0
    assert len(warnings) == 1
    assert "week=4" in warnings[0]


def test_playoffs_standings_follow_the_result_sets() -> None:
    repository = _FakeResults({1: [_matchup(_match(0, 2))]})
    totals, weeks_played = get_all_week_results(repository, 8, Phase.REGULAR)

    standings = organize_team_standings(totals, weeks_played, _season(), phase=Phase.PLAYOFFS)
    assert [(standing.name, standing.playoffs_bracket) for standing in standings] == [
        ("Beta", "Champions"),
        ("Alpha", "Runners-up"),
    ]
    assert standings[0].as_dict()["playoffsBracket"] == "Champions"
