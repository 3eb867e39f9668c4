"""Tests for the season statistics accumulator."""

from __future__ import annotations

import pytest

from domain.accumulator import (
    FlatReplay,
    StatsAccumulator,
    StatsIntegrityError,
    collect_map_names,
    flatten_replays,
)
from domain.buckets import TeamWinRates
from domain.common import (
    CastGroupStatus,
    Phase,
    ReplayPlayer,
    ReplayRecord,
    ReplayTeam,
    SeasonMiscData,
    SeasonRecord,
    Team,
)
from domain.trackers import WinRate
from replays.index import MatchupInfo, PlayerMatchup, TeamMatchupGroup, TierGroup
from replays.keys import ReplayKey


def _season() -> SeasonRecord:
    return SeasonRecord(
        season_number=8,
        teams=(Team(name="Alpha", title_aliases=("ALP",)), Team(name="Beta", title_aliases=("BET",))),
    )


def _record(
    filename: str,
    winner_race: str,
    loser_race: str,
    *,
    frames: int = 10_000,
    map_name: str = "Fighting Spirit",
    game_type: str = "melee",
    has_winner: bool = True,
) -> ReplayRecord:
    return ReplayRecord(
        filename=filename,
        frames=frames,
        duration_ms=frames * 42,
        map_name=map_name,
        game_type=game_type,
        teams=(
            ReplayTeam(index=1, is_winner=has_winner, players=(ReplayPlayer("PlayerA", winner_race, 300, 200),)),
            ReplayTeam(index=2, is_winner=False, players=(ReplayPlayer("PlayerB", loser_race, 200, 100),)),
        ),
    )


def _flat(record: ReplayRecord, *, tier: int = 1, week: int = 1) -> FlatReplay:
    return FlatReplay(
        record=record,
        phase=Phase.REGULAR,
        week=week,
        tier=tier,
        teams=("ALP", "BET"),
        players=("PlayerA", "PlayerB"),
    )


def _accumulator(**kwargs: object) -> StatsAccumulator:
    return StatsAccumulator(_season(), ["Fighting Spirit"], **kwargs)  # type: ignore[arg-type]


def test_active_and_passive_race_wins() -> None:
    accumulator = _accumulator()
    accumulator.add_replays(
        [
            _flat(_record("1.rep", "T", "Z")),
            _flat(_record("2.rep", "Z", "T")),
            _flat(_record("3.rep", "P", "T")),
            _flat(_record("4.rep", "Z", "Z")),
        ]
    )
    stats = accumulator.finalize()

    assert stats.match_status.known_winner == 4
    assert stats.match_status.active_race_won == 2
    assert stats.match_status.passive_race_won == 1

    tvz = stats.matchups["TvZ"]
    assert (tvz.games_played, tvz.games_won, tvz.games_lost) == (2, 1, 1)
    assert stats.matchups["PvT"].games_won == 1
    assert stats.matchups["ZvZ"].games_played == 1
    assert stats.matchups["ZvZ"].win_rate == "N/A"

    zerg = stats.races["Z"]
    assert zerg.games_played == 4
    assert zerg.games_vs == {"T": 2, "Z": 2, "P": 0}
    assert zerg.games_played_vs_other == 2
    assert zerg.games_won_vs_other == 1
    assert zerg.mirror_rate == "50.00%"

    assert stats.tiers[1].games_played == 4
    assert stats.tiers[1].win_rates["TvZ"].won == 1
    assert stats.tiers[1].average_apm["Z"] == 250
    assert stats.maps["Fighting Spirit"].games_played == 4


def test_games_without_a_winner_are_only_counted_as_unknown() -> None:
    accumulator = _accumulator()
    accumulator.add_replay(_flat(_record("1.rep", "T", "Z", has_winner=False)))
    accumulator.add_replay(_flat(_record("2.rep", "T", "Z")))
    stats = accumulator.finalize()

    assert stats.match_status.unknown_winner == 1
    assert stats.match_status.known_winner == 1
    assert stats.general.total_games == 2
    assert stats.matchups["TvZ"].games_played == 1
    assert stats.general.durations.count == 1


def test_ignored_frame_counts_skip_durations_but_not_game_types() -> None:
    accumulator = _accumulator(ignored_frame_counts=(644, 1032))
    accumulator.add_replay(_flat(_record("short.rep", "T", "Z", frames=644, game_type="tvb")))
    accumulator.add_replay(_flat(_record("long.rep", "T", "Z", frames=20_000)))
    stats = accumulator.finalize()

    assert stats.general.durations.count == 1
    assert stats.general.durations.shortest is not None
    assert stats.general.durations.shortest.info.filename == "long.rep"
    assert stats.general.game_types.types == {"tvb": 1, "melee": 1}
    assert stats.tiers[1].game_types.total == 2
    assert stats.matchups["TvZ"].games_played == 2
    assert stats.matchups["TvZ"].durations.count == 1
    assert stats.tiers[1].durations.count == 1
    assert stats.maps["Fighting Spirit"].durations.count == 1
    assert stats.teams["ALP"].durations.count == 1
    assert stats.teams["BET"].durations.count == 1


def test_durations_are_recorded_for_both_teams() -> None:
    accumulator = _accumulator()
    accumulator.add_replay(_flat(_record("1.rep", "T", "Z")))
    stats = accumulator.finalize()

    assert stats.teams["ALP"].durations.count == 1
    assert stats.teams["BET"].durations.count == 1
    longest = stats.teams["ALP"].durations.longest
    assert longest is not None
    assert longest.matchup == "TvZ"
    assert longest.info.section == "regular_season"


def test_map_aliases_and_unknown_maps() -> None:
    accumulator = _accumulator(map_aliases={"Fighting Spirit 1.3": "Fighting Spirit"})
    accumulator.add_replay(_flat(_record("1.rep", "T", "Z", map_name="Fighting Spirit 1.3")))
    assert accumulator.maps["Fighting Spirit"].games_played == 1

    with pytest.raises(ValueError, match="not in the collected map names"):
        accumulator.add_replay(_flat(_record("2.rep", "T", "Z", map_name="Polypoid")))


def test_tier_outside_the_configured_range_raises() -> None:
    accumulator = _accumulator(tier_count=2)
    with pytest.raises(ValueError, match="outside the 2 configured tiers"):
        accumulator.add_replay(_flat(_record("1.rep", "T", "Z"), tier=3))


def test_mismatched_counts_raise_integrity_error() -> None:
    accumulator = _accumulator()
    accumulator.add_replay(_flat(_record("1.rep", "T", "Z")))
    accumulator.status.known_winner += 1

    with pytest.raises(StatsIntegrityError, match="numbers don't add up"):
        accumulator.finalize()


def test_cast_groups_count_regular_season_only() -> None:
    info = MatchupInfo(replays=(), duration_ms=0, race_matchup=None, earliest_start=None, latest_start=None)

    def group(phase: Phase, was_cast: bool) -> TeamMatchupGroup:
        key = ReplayKey(season=8, phase=phase, week=1, teams=("Alpha", "Beta"), tier=1, players=("a", "b"))
        tier = TierGroup(
            tier=1,
            matchups=(PlayerMatchup(key=key, info=info),),
            cast_status=CastGroupStatus(was_cast=was_cast),
        )
        return TeamMatchupGroup(
            phase=phase,
            week=1,
            teams=("ALP", "BET"),
            team_names=("Alpha", "Beta"),
            tiers=(tier,),
        )

    accumulator = _accumulator()
    accumulator.add_cast_groups([group(Phase.REGULAR, True), group(Phase.PLAYOFFS, False)])
    stats = accumulator.finalize()

    assert stats.general.cast_coverage.total.as_dict() == {"played": 1, "cast": 1, "percentage": "100.00%"}
    assert stats.teams["ALP"].cast.cast == 1
    assert stats.teams["BET"].cast.played == 1


def test_team_win_rates_and_misc_data_reach_team_stats() -> None:
    accumulator = _accumulator()
    accumulator.set_team_win_rates("ALP", TeamWinRates(games=WinRate(played=4, won=3)))
    stats = accumulator.finalize(SeasonMiscData(most_improved_players={"ALP": ["PlayerA"]}))

    assert stats.teams["ALP"].win_rates.games.percentage == "75.00%"
    assert stats.teams["ALP"].most_improved_players == ["PlayerA"]
    assert stats.teams["BET"].win_rates == TeamWinRates()
    assert stats.teams["BET"].most_improved_players is None


def test_unknown_team_alias_raises() -> None:
    with pytest.raises(KeyError):
        _accumulator().set_team_win_rates("XYZ", TeamWinRates())


def test_flatten_and_collect_map_names_in_order_of_appearance() -> None:
    records = (
        _record("1.rep", "T", "Z", map_name="Polypoid"),
        _record("2.rep", "T", "Z", map_name="Fighting Spirit 1.3"),
        _record("3.rep", "T", "Z", map_name="Polypoid"),
    )
    info = MatchupInfo(replays=records, duration_ms=0, race_matchup="TvZ", earliest_start=None, latest_start=None)
    key = ReplayKey(season=8, phase=Phase.REGULAR, week=2, teams=("Alpha", "Beta"), tier=0, players=("a", "b"))
    group = TeamMatchupGroup(
        phase=Phase.REGULAR,
        week=2,
        teams=("ALP", "BET"),
        team_names=("Alpha", "Beta"),
        tiers=(TierGroup(tier=0, matchups=(PlayerMatchup(key=key, info=info),)),),
    )

    replays = flatten_replays([group])
    assert [(replay.week, replay.tier, replay.players) for replay in replays] == [(2, 0, ("a", "b"))] * 3
    assert collect_map_names(replays, {"Fighting Spirit 1.3": "Fighting Spirit"}) == [
        "Polypoid",
        "Fighting Spirit",
    ]
