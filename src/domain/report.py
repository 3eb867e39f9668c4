"""Shape finalised season statistics into the public JSON-ready tree."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from domain.accumulator import SeasonStats
from domain.buckets import MatchupWinRate, TeamStats
from domain.results import TeamStanding
from domain.trackers import (
    DurationSummary,
    GameRecordEntry,
    GameTypeSummary,
    WinRate,
)

# Team win rates: active matchups, then mirrors, then the reversed matchups.
TEAM_WIN_RATE_ORDER = ("ZvP", "PvT", "TvZ", "ZvZ", "TvT", "PvP", "PvZ", "TvP", "ZvT")


def organize_stats(
    stats: SeasonStats,
    standings_regular: Sequence[TeamStanding] = (),
    standings_playoffs: Sequence[TeamStanding] = (),
) -> dict[str, Any]:
    general = stats.general
    coverage = general.cast_coverage
    return {
        "perTier": {
            str(tier): {
                "averageAPM": dict(data.average_apm),
                "averageEAPM": dict(data.average_eapm),
                "gameDurations": organize_game_durations(data.durations),
                "gameTypes": organize_game_types(data.game_types),
                "winRates": _win_rates(data.win_rates),
            }
            for tier, data in stats.tiers.items()
        },
        "general": {
            "gameDurations": organize_game_durations(general.durations),
            "gameTypes": {
                **organize_game_types(general.game_types),
                "total": general.total_games,
            },
            "castRate": {
                **coverage.total.as_dict(),
                "perWeek": {str(week): count.as_dict() for week, count in coverage.per_week.items()},
                "perTier": {str(tier): count.as_dict() for tier, count in coverage.per_tier.items()},
            },
        },
        "perMap": [
            {
                "mapName": data.name,
                "gamesPlayed": data.games_played,
                "gameDurations": organize_game_durations(data.durations),
                "winRates": _win_rates(data.win_rates),
            }
            for data in stats.maps.values()
        ],
        "perMatchup": {
            label: {
                "gamesPlayed": data.games_played,
                "gamesWon": data.games_won,
                "gamesLost": data.games_lost,
                "gameDurations": organize_game_durations(data.durations),
                "winRate": data.win_rate,
            }
            for label, data in stats.matchups.items()
        },
        "perRace": {
            race: {
                "averageAPM": data.average_apm,
                "averageEAPM": data.average_eapm,
                "gamesPlayed": {
                    "vSelf": data.games_vs[race],
                    "vAll": data.games_played,
                    "vZ": data.games_vs["Z"],
                    "vT": data.games_vs["T"],
                    "vP": data.games_vs["P"],
                },
                "gamesPlayedVsOther": data.games_played_vs_other,
                "gamesWonVsOther": data.games_won_vs_other,
                "winRate": data.win_rate,
                "mirrorRate": data.mirror_rate,
            }
            for race, data in stats.races.items()
        },
        "perTeam": organize_teams(stats.teams, standings_regular, standings_playoffs),
        "matchStatus": {
            "knownWinner": stats.match_status.known_winner,
            "unknownWinner": stats.match_status.unknown_winner,
            "activeRaceWon": stats.match_status.active_race_won,
            "passiveRaceWon": stats.match_status.passive_race_won,
        },
    }


def organize_teams(
    teams: Mapping[str, TeamStats],
    standings_regular: Sequence[TeamStanding],
    standings_playoffs: Sequence[TeamStanding],
) -> dict[str, Any]:
    """Per-team stats ordered by regular season rank; unranked teams go last."""
    regular = {standing.name: standing for standing in standings_regular}
    playoffs = {standing.name: standing for standing in standings_playoffs}

    def rank(item: tuple[str, TeamStats]) -> tuple[bool, int]:
        standing = regular.get(item[1].name)
        return (standing is None, standing.n if standing is not None else 0)

    organized = {}
    for alias, data in sorted(teams.items(), key=rank):
        standing_regular = regular.get(data.name)
        standing_playoffs = playoffs.get(data.name)
        organized[alias] = {
            "teamName": data.name,
            "statsRegular": standing_regular.as_dict() if standing_regular else None,
            "statsPlayoffs": standing_playoffs.as_dict() if standing_playoffs else None,
            "gameDurations": organize_game_durations(data.durations),
            "matchWins": {
                "matches": _match_wins(data.win_rates.games),
                "sets": _match_wins(data.win_rates.maps),
            },
            "mostImprovedPlayers": data.most_improved_players,
            "winRates": {
                label: _team_win_rate(data.win_rates.matchups.get(label, WinRate()))
                for label in TEAM_WIN_RATE_ORDER
            },
            "castRate": data.cast.as_dict(),
        }
    return organized


def organize_game_durations(summary: DurationSummary) -> dict[str, Any]:
    return {
        "shortest": _record(summary.shortest),
        "longest": _record(summary.longest),
        "average": {"durationMs": summary.average_ms, "duration": summary.average},
        "median": {"durationMs": summary.median_ms, "duration": summary.median},
    }


def organize_game_types(summary: GameTypeSummary) -> dict[str, Any]:
    return {"types": dict(summary.types), "tvbPercentage": summary.tvb_percentage}


def _record(entry: GameRecordEntry | None) -> dict[str, Any] | None:
    if entry is None:
        return None
    return {
        "info": entry.info.as_dict(),
        "matchup": entry.matchup,
        "durationMs": entry.duration_ms,
        "duration": entry.duration,
    }


def _win_rates(rates: Mapping[str, MatchupWinRate]) -> dict[str, Any]:
    return {label: rate.as_dict() for label, rate in rates.items()}


def _team_win_rate(rate: WinRate) -> dict[str, Any]:
    return {"played": rate.played, "won": rate.won, "winRate": rate.percentage}


def _match_wins(rate: WinRate) -> dict[str, Any]:
    return {
        "played": rate.played,
        "won": rate.won,
        "lost": rate.lost,
        "percentage": rate.percentage,
    }


__all__ = [
    "TEAM_WIN_RATE_ORDER",
    "organize_game_durations",
    "organize_game_types",
    "organize_stats",
    "organize_teams",
]
