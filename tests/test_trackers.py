"""Tests for the running statistics trackers and the stats buckets."""

from __future__ import annotations

import itertools

import pytest

from domain.buckets import MapBucket, MatchupBucket, RaceBucket, TeamBucket
from domain.formatting import NOT_AVAILABLE
from domain.trackers import (
    APMTracker,
    CastCoverage,
    DurationTracker,
    GameInfo,
    GameTypeTally,
    MatchupWinTally,
)


def _info(filename: str) -> GameInfo:
    return GameInfo(
        filename=filename,
        players=("PlayerA", "PlayerB"),
        races=("T", "Z"),
        tier=1,
        week=1,
        teams=("ALP", "BET"),
        section="regular_season",
    )


@pytest.mark.parametrize("durations", list(itertools.permutations([500, 100, 900])))
def test_duration_tracker_is_order_independent(durations: tuple[int, ...]) -> None:
    tracker = DurationTracker()
    for duration in durations:
        tracker.add(duration, "TvZ", _info(f"{duration}.rep"))

    summary = tracker.summary()
    assert summary.count == 3
    assert summary.shortest is not None and summary.shortest.duration_ms == 100
    assert summary.longest is not None and summary.longest.duration_ms == 900
    assert summary.average_ms == 500
    assert summary.median_ms == 500


def test_duration_tracker_ties_go_to_the_last_game() -> None:
    tracker = DurationTracker()
    tracker.add(300, "TvZ", _info("first.rep"))
    tracker.add(300, "TvZ", _info("second.rep"))

    summary = tracker.summary()
    assert summary.shortest is not None and summary.shortest.info.filename == "second.rep"
    assert summary.longest is not None and summary.longest.info.filename == "second.rep"


def test_empty_duration_summary() -> None:
    summary = DurationTracker().summary()
    assert summary.count == 0
    assert summary.shortest is None
    assert summary.average is None
    assert summary.median is None


def test_apm_tracker_per_race_averages() -> None:
    tracker = APMTracker(per_race=True)
    tracker.add(200, 150, "T")
    tracker.add(301, 200, "T")

    apm, eapm = tracker.averages()
    assert apm == {"T": 251, "Z": None, "P": None}
    assert eapm["T"] == 175

    with pytest.raises(ValueError, match="unknown race"):
        tracker.add(100, 100, "R")


def test_matchup_win_tally_counts_mirrors_as_won() -> None:
    tally = MatchupWinTally()
    tally.add("TvZ", True)
    tally.add("TvZ", False)
    tally.add("PvP", None)

    snapshot = tally.snapshot()
    assert tally.games_played == 3
    assert (snapshot["TvZ"].played, snapshot["TvZ"].won) == (2, 1)
    assert (snapshot["PvP"].played, snapshot["PvP"].won) == (1, 1)
    assert set(tally.active_snapshot()) == {"ZvP", "PvT", "TvZ"}


def test_game_type_tally_top_vs_bottom_share() -> None:
    tally = GameTypeTally()
    for game_type in ("melee", "tvb", "tvb", "ums"):
        tally.add(game_type)

    summary = tally.summary()
    assert summary.total == 4
    assert summary.tvb_percentage == "50.00%"
    assert GameTypeTally().summary().tvb_percentage == NOT_AVAILABLE


def test_cast_coverage_per_week_and_tier() -> None:
    coverage = CastCoverage()
    coverage.add(week=2, tier=1, was_cast=True)
    coverage.add(week=1, tier=1, was_cast=False)
    coverage.add(week=1, tier=0, was_cast=True)

    summary = coverage.summary()
    assert summary.total.as_dict() == {"played": 3, "cast": 2, "percentage": "66.67%"}
    assert list(summary.per_week) == [1, 2]
    assert summary.per_tier[1].percentage == "50.00%"


def test_matchup_bucket_ignores_results_of_mirrors() -> None:
    mirror = MatchupBucket("TvT")
    mirror.add_game(None)
    stats = mirror.finalize()
    assert (stats.games_played, stats.games_won, stats.games_lost) == (1, 0, 0)
    assert stats.win_rate == NOT_AVAILABLE
    assert stats.ratio is None

    active = MatchupBucket("TvZ")
    active.add_game(True)
    active.add_game(False)
    active.add_game(True)
    stats = active.finalize()
    assert stats.win_rate == "66.67%"
    assert stats.ratio == pytest.approx(2 / 3)


def test_map_bucket_relative_rate_against_the_matchup() -> None:
    bucket = MapBucket("Fighting Spirit")
    bucket.add_game("TvZ", True)
    bucket.add_game("TvZ", True)
    bucket.add_game("TvZ", False)
    bucket.add_game("TvZ", True)

    stats = bucket.finalize({"TvZ": 0.5, "ZvP": None, "PvT": 0.5})
    assert stats.win_rates["TvZ"].win_rate == "75.00%"
    assert stats.win_rates["TvZ"].relative_rate == "+25.00%"
    assert stats.win_rates["ZvP"].relative_rate == NOT_AVAILABLE
    assert stats.win_rates["PvT"].relative_rate == NOT_AVAILABLE
    assert stats.win_rates["TvZ"].as_dict() == {
        "played": 4,
        "won": 3,
        "winRate": "75.00%",
        "relativeRate": "+25.00%",
    }


def test_race_bucket_mirror_rate_and_unknown_opponent() -> None:
    bucket = RaceBucket("Z")
    bucket.add_game("Z")
    bucket.add_game("T")
    bucket.add_game("P")
    bucket.add_game("Z")
    bucket.add_result_vs_other(True)
    bucket.add_result_vs_other(False)

    with pytest.raises(ValueError, match="unknown opponent race"):
        bucket.add_game("R")

    stats = bucket.finalize()
    assert stats.mirror_rate == "50.00%"
    assert stats.win_rate == "50.00%"
    assert stats.average_apm is None


def test_finalized_bucket_rejects_mutation() -> None:
    bucket = TeamBucket("ALP", "Alpha")
    bucket.add_cast_group(True)
    stats = bucket.finalize()
    assert stats.cast.played == 1
    assert bucket.finalized

    with pytest.raises(RuntimeError, match="already finalised"):
        bucket.add_cast_group(False)
    with pytest.raises(RuntimeError, match="already finalised"):
        bucket.finalize()
