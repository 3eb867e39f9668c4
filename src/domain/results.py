"""Per-team match, map and weekly matchup totals from the week result files."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, fields
from typing import Protocol

from domain.common import MatchResultRecord, Phase, PlayerResult, SeasonRecord
from domain.formatting import format_percentage

PLAYOFFS_BRACKET_LABELS = (
    ("Champions", "Runners-up"),
    ("3-4", "3-4"),
    ("5-6", "5-6"),
)


class WalkoverError(ValueError):
    """A walkover whose inactive player is neither of the two players."""


class WeekResultsSource(Protocol):
    def get_played_weeks(self, season: int, phase: Phase = ...) -> int: ...

    def get_week_results(self, season: int, week: int, phase: Phase = ...) -> list[MatchResultRecord]: ...


@dataclass
class TeamTotals:
    """Running totals for one team; `real_*` fields exclude walkovers."""

    matches_played: int = 0
    real_matches_played: int = 0
    matches_won: int = 0
    real_matches_won: int = 0
    maps_played: int = 0
    maps_won: int = 0
    matchups_won: int = 0
    matchups_drawn: int = 0

    def merge(self, other: TeamTotals) -> None:
        for item in fields(self):
            setattr(self, item.name, getattr(self, item.name) + getattr(other, item.name))


@dataclass(frozen=True)
class TeamStanding:
    name: str
    n: int
    played_weeks: int
    totals: TeamTotals
    playoffs_bracket: str | None = None

    @property
    def matches_won_ratio(self) -> float:
        return _ratio(self.totals.matches_won, self.totals.matches_played)

    @property
    def real_matches_won_ratio(self) -> float:
        return _ratio(self.totals.real_matches_won, self.totals.real_matches_played)

    @property
    def maps_won_ratio(self) -> float:
        return _ratio(self.totals.maps_won, self.totals.maps_played)

    def as_dict(self) -> dict[str, object]:
        totals = self.totals
        payload: dict[str, object] = {
            "name": self.name,
            "n": self.n,
            "playedWeeks": self.played_weeks,
            "matchesPlayed": totals.matches_played,
            "matchesWon": totals.matches_won,
            "realMatchesPlayed": totals.real_matches_played,
            "realMatchesWon": totals.real_matches_won,
            "mapsPlayed": totals.maps_played,
            "mapsWon": totals.maps_won,
            "matchupsWon": totals.matchups_won,
            "matchupsDrawn": totals.matchups_drawn,
            "matchesWonP": format_percentage(totals.matches_won, totals.matches_played),
            "realMatchesWonP": format_percentage(totals.real_matches_won, totals.real_matches_played),
            "mapsWonP": format_percentage(totals.maps_won, totals.maps_played),
        }
        if self.playoffs_bracket is not None:
            payload["playoffsBracket"] = self.playoffs_bracket
        return payload


def get_walkover_winner(
    player1: PlayerResult,
    player2: PlayerResult,
    is_walkover: bool,
    inactive_players: Sequence[str],
) -> str | None:
    """Return "1" or "2" for the player who won by forfeit, None without a walkover."""
    if not is_walkover:
        return None
    inactive = inactive_players[0] if inactive_players else None
    if inactive is not None and player1.name == inactive:
        return "2"
    if inactive is not None and player2.name == inactive:
        return "1"
    raise WalkoverError(
        f'invalid value for walkover win: 1 "{player1.name}", 2 "{player2.name}", '
        f"inactive: {list(inactive_players)}"
    )


def get_winner(score1: int, score2: int, walkover_winner: str | None = None) -> str:
    """Return "1", "2", or "0" for a draw."""
    if walkover_winner:
        return walkover_winner
    if score1 == score2:
        return "0"
    return "1" if score1 > score2 else "2"


def get_week_results(
    matchups: Iterable[MatchResultRecord],
    *,
    season: int,
    week: int,
    phase: Phase = Phase.REGULAR,
    warn: Callable[[str], None] | None = None,
) -> dict[str, TeamTotals]:
    """Compute per-team totals for the matchups of one week."""
    matchups = list(matchups)
    teams: dict[str, TeamTotals] = {}
    for matchup in matchups:
        teams.setdefault(matchup.team1, TeamTotals())
        teams.setdefault(matchup.team2, TeamTotals())

    for matchup in matchups:
        week_totals = {"1": TeamTotals(), "2": TeamTotals()}
        matches_played = 0
        real_matches_played = 0
        maps_played = 0

        for match in matchup.matches:
            walkover_winner = get_walkover_winner(
                match.player1, match.player2, match.walkover, match.inactive_players
            )
            if walkover_winner is not None:
                week_totals[walkover_winner].matches_won += 1
            else:
                winner = get_winner(match.player1.score, match.player2.score)
                if winner == "0" and match.player1.score == 0:
                    # Not played.
                    continue
                if winner != "0":
                    week_totals[winner].matches_won += 1
                    week_totals[winner].real_matches_won += 1
                    real_matches_played += 1
            matches_played += 1
            maps_played += match.player1.score + match.player2.score
            week_totals["1"].maps_won += match.player1.score
            week_totals["2"].maps_won += match.player2.score

        wins1 = week_totals["1"].matches_won
        wins2 = week_totals["2"].matches_won
        maps1 = week_totals["1"].maps_won
        maps2 = week_totals["2"].maps_won
        if wins1 != wins2:
            week_totals["1" if wins1 > wins2 else "2"].matchups_won += 1
        elif maps1 != maps2:
            week_totals["1" if maps1 > maps2 else "2"].matchups_won += 1
        else:
            if warn is not None:
                warn(
                    "Draw in number of wins and number of maps! "
                    f"season={season} week={week} phase={phase.value} "
                    f"team1={matchup.team1} team2={matchup.team2}"
                )
            week_totals["1"].matchups_drawn += 1
            week_totals["2"].matchups_drawn += 1

        for side, team in (("1", matchup.team1), ("2", matchup.team2)):
            totals = week_totals[side]
            totals.matches_played = matches_played
            totals.real_matches_played = real_matches_played
            totals.maps_played = maps_played
            teams[team].merge(totals)

    return teams


def merge_team_totals(
    target: dict[str, TeamTotals],
    source: Mapping[str, TeamTotals],
) -> dict[str, TeamTotals]:
    for team, totals in source.items():
        target.setdefault(team, TeamTotals()).merge(totals)
    return target


def get_all_week_results(
    repository: WeekResultsSource,
    season: int,
    phase: Phase = Phase.REGULAR,
    *,
    warn: Callable[[str], None] | None = None,
) -> tuple[dict[str, TeamTotals], int]:
    """Merge every played week of a phase into per-team totals."""
    weeks_played = repository.get_played_weeks(season, phase)
    teams: dict[str, TeamTotals] = {}
    for week in range(1, weeks_played + 1):
        week_results = get_week_results(
            repository.get_week_results(season, week, phase),
            season=season,
            week=week,
            phase=phase,
            warn=warn,
        )
        merge_team_totals(teams, week_results)
    return teams, weeks_played


def organize_team_standings(
    team_totals: Mapping[str, TeamTotals],
    weeks_played: int,
    season: SeasonRecord,
    *,
    use_real_matches: bool = False,
    phase: Phase = Phase.REGULAR,
) -> list[TeamStanding]:
    """Rank teams by weeks won, then match win rate, then map win rate."""

    def sort_key(item: tuple[str, TeamTotals]) -> tuple[int, float, float]:
        _, totals = item
        matches_ratio = (
            _ratio(totals.real_matches_won, totals.real_matches_played)
            if use_real_matches
            else _ratio(totals.matches_won, totals.matches_played)
        )
        return (totals.matchups_won, matches_ratio, _ratio(totals.maps_won, totals.maps_played))

    ranked = sorted(team_totals.items(), key=sort_key, reverse=True)
    standings = [
        TeamStanding(name=name, n=index, played_weeks=weeks_played, totals=totals)
        for index, (name, totals) in enumerate(ranked, start=1)
    ]
    if phase is not Phase.PLAYOFFS:
        return standings

    by_name = {standing.name: standing for standing in standings}
    playoffs: list[TeamStanding] = []
    for set_index, result_set in enumerate(season.playoffs_results):
        set_standings = []
        for alias in result_set:
            team = season.team_by_alias(alias)
            if team.name not in by_name:
                raise ValueError(f"playoffs team {team.name!r} has no playoffs results")
            set_standings.append(by_name[team.name])
        set_standings.sort(
            key=lambda standing: sort_key((standing.name, standing.totals)),
            reverse=True,
        )
        labels = PLAYOFFS_BRACKET_LABELS[set_index] if set_index < len(PLAYOFFS_BRACKET_LABELS) else ()
        for position, standing in enumerate(set_standings):
            playoffs.append(
                TeamStanding(
                    name=standing.name,
                    n=len(playoffs) + 1,
                    played_weeks=standing.played_weeks,
                    totals=standing.totals,
                    playoffs_bracket=labels[position] if position < len(labels) else None,
                )
            )
    return playoffs


def _ratio(amount: int, total: int) -> float:
    return amount / total if total else 0.0


__all__ = [
    "TeamStanding",
    "TeamTotals",
    "WalkoverError",
    "get_all_week_results",
    "get_walkover_winner",
    "get_week_results",
    "get_winner",
    "merge_team_totals",
    "organize_team_standings",
]
