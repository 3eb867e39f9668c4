"""Per-team win rates from the result files, split by ordered race pair."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from functools import partial

from domain.buckets import TeamWinRates
from domain.common import MatchEntry, MatchResultRecord, Phase, Team
from domain.races import ALL_MATCHUP_PERMUTATIONS, race_letter
from domain.trackers import WinRate, WinRateTracker
from replays.keys import ReplayKey

# Returns the race opposite the known race, read from the match's replay.
RaceResolver = Callable[[str, ReplayKey], str]

SeasonResults = Mapping[Phase, Mapping[int, Sequence[MatchResultRecord]]]


def resolve_match_races(
    entry: MatchEntry,
    make_key: Callable[[], ReplayKey],
    race_resolver: RaceResolver,
) -> tuple[str, str] | None:
    """Return (player1 race, player2 race), resolving one placeholder race.

    Placeholders are anything other than T, Z or P (e.g. "Race Picker").
    Returns None when both races are placeholders. `make_key` is only called
    when the replay has to be read.
    """
    letters = [race_letter(entry.player1.race), race_letter(entry.player2.race)]
    unknown = [index for index, letter in enumerate(letters) if letter is None]
    if not unknown:
        return (letters[0], letters[1])
    if len(unknown) > 1:
        return None

    known_race = letters[1 - unknown[0]]
    letters[unknown[0]] = race_resolver(known_race, make_key())
    return (letters[0], letters[1])


def get_team_win_rates(
    team: Team,
    results: SeasonResults,
    season_number: int,
    race_resolver: RaceResolver,
) -> TeamWinRates:
    """Tally a team's matches, maps and matchups over every phase of results.

    Result files name teams by their full name. Draws and walkovers are not
    counted.
    """
    games = WinRateTracker()
    maps_played = 0
    maps_won = 0
    matchups = {label: WinRateTracker() for label in ALL_MATCHUP_PERMUTATIONS}

    for phase, weeks in results.items():
        for week, records in sorted(weeks.items()):
            for record in records:
                if record.team1 == team.name:
                    side = 0
                elif record.team2 == team.name:
                    side = 1
                else:
                    continue

                for entry in record.matches:
                    friendly = entry.players[side]
                    opponent = entry.players[1 - side]
                    if entry.walkover or friendly.score == opponent.score:
                        continue

                    is_win = friendly.score > opponent.score
                    games.add(is_win)
                    maps_played += friendly.score + opponent.score
                    maps_won += friendly.score

                    races = resolve_match_races(
                        entry,
                        partial(_replay_key, season_number, phase, week, record, entry),
                        race_resolver,
                    )
                    if races is None:
                        continue
                    matchups[f"{races[side]}v{races[1 - side]}"].add(is_win)

    return TeamWinRates(
        games=games.snapshot(),
        maps=WinRate(played=maps_played, won=maps_won),
        matchups={label: tracker.snapshot() for label, tracker in matchups.items()},
    )


def _replay_key(
    season_number: int,
    phase: Phase,
    week: int,
    record: MatchResultRecord,
    entry: MatchEntry,
) -> ReplayKey:
    """Key of a match's replays; the tier is the lower of the two player tiers."""
    tiers = [player.tier for player in entry.players if player.tier is not None]
    if not tiers:
        raise ValueError(
            f"match {entry.player1.name} vs {entry.player2.name} has no player tier"
        )
    return ReplayKey(
        season=season_number,
        phase=phase,
        week=week,
        teams=record.teams,
        tier=min(tiers),
        players=(entry.player1.name, entry.player2.name),
    )


__all__ = [
    "RaceResolver",
    "SeasonResults",
    "get_team_win_rates",
    "resolve_match_races",
]
