"""Aggregate replays, cast coverage and results into season statistics."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

from domain.buckets import (
    GeneralBucket,
    GeneralStats,
    MapBucket,
    MapStats,
    MatchupBucket,
    MatchupStats,
    RaceBucket,
    RaceStats,
    TeamBucket,
    TeamStats,
    TeamWinRates,
    TierBucket,
    TierStats,
)
from domain.common import Phase, ReplayRecord, SeasonMiscData, SeasonRecord
from domain.config import AnalysisConfig
from domain.races import ALL_MATCHUPS, RACES, check_active_win, is_mirror, matchup_label, normalize_map_name
from domain.trackers import GameInfo
from domain.win_rates import RaceResolver, SeasonResults, get_team_win_rates
from replays.index import TeamMatchupGroup


class StatsIntegrityError(RuntimeError):
    """The per-dimension game counts disagree; the report would be wrong."""


@dataclass(frozen=True)
class FlatReplay:
    """One replay with the context of the directory it was found in."""

    record: ReplayRecord
    phase: Phase
    week: int
    tier: int
    teams: tuple[str, str]
    players: tuple[str, str]

    def game_info(self) -> GameInfo:
        return GameInfo(
            filename=self.record.filename,
            players=self.players,
            races=self.record.races,
            tier=self.tier,
            week=self.week,
            teams=self.teams,
            section=self.phase.section,
        )


@dataclass
class MatchStatus:
    known_winner: int = 0
    unknown_winner: int = 0
    active_race_won: int = 0
    passive_race_won: int = 0


@dataclass(frozen=True)
class SeasonStats:
    general: GeneralStats
    tiers: Mapping[int, TierStats]
    teams: Mapping[str, TeamStats]
    maps: Mapping[str, MapStats]
    matchups: Mapping[str, MatchupStats]
    races: Mapping[str, RaceStats]
    match_status: MatchStatus


def flatten_replays(groups: Iterable[TeamMatchupGroup]) -> list[FlatReplay]:
    return [
        FlatReplay(
            record=record,
            phase=group.phase,
            week=group.week,
            tier=tier.tier,
            teams=group.teams,
            players=matchup.players,
        )
        for group in groups
        for tier in group.tiers
        for matchup in tier.matchups
        for record in matchup.info.replays
    ]


def collect_map_names(replays: Iterable[FlatReplay], aliases: Mapping[str, str]) -> list[str]:
    """Normalised map names in order of first appearance."""
    names: dict[str, None] = {}
    for replay in replays:
        names.setdefault(normalize_map_name(replay.record.map_name, aliases), None)
    return list(names)


class StatsAccumulator:
    """Single pass over the season's replays, feeding every dimension bucket."""

    def __init__(
        self,
        season: SeasonRecord,
        map_names: Sequence[str],
        *,
        ignored_frame_counts: Iterable[int] = (),
        map_aliases: Mapping[str, str] | None = None,
        tier_count: int = 4,
    ) -> None:
        self.season = season
        self.ignored_frame_counts = frozenset(ignored_frame_counts)
        self.map_aliases = dict(map_aliases or {})
        self.general = GeneralBucket()
        self.tiers = {tier: TierBucket(tier) for tier in range(tier_count)}
        self.teams = {team.alias: TeamBucket(team.alias, team.name) for team in season.teams}
        self.maps = {name: MapBucket(name) for name in map_names}
        self.matchups = {label: MatchupBucket(label) for label in ALL_MATCHUPS}
        self.races = {race: RaceBucket(race) for race in RACES}
        self.status = MatchStatus()
        self.total_games = 0

    def add_replays(self, replays: Iterable[FlatReplay]) -> None:
        for replay in replays:
            self.add_replay(replay)

    def add_replay(self, replay: FlatReplay) -> None:
        record = replay.record
        self.total_games += 1

        winning_team = record.winning_team
        losing_team = record.losing_team
        if winning_team is None or losing_team is None:
            self.status.unknown_winner += 1
            return

        if len(record.teams) != 2:
            raise ValueError(f"{record.filename}: expected 2 teams, got {len(record.teams)}")
        tier = self._tier_bucket(replay)
        map_bucket = self._map_bucket(record)

        self.status.known_winner += 1

        for team in record.teams:
            player = team.primary_player
            tier.add_apm(player.apm, player.eapm, player.race)
            self._race_bucket(player.race, record).add_apm(player.apm, player.eapm)

        race_a, race_b = record.races
        race_winner = winning_team.primary_player.race
        race_loser = losing_team.primary_player.race
        label = matchup_label(race_a, race_b)
        mirror = is_mirror(label)
        active_race_won = None if mirror else check_active_win(race_winner, race_loser)

        self.general.add_game_type(record.game_type)
        tier.add_game_type(record.game_type)

        if record.frames not in self.ignored_frame_counts:
            info = replay.game_info()
            targets = [self.general, self.matchups[label], tier, map_bucket]
            targets.extend(self._team_bucket(alias) for alias in replay.teams)
            for bucket in targets:
                bucket.add_duration(record.duration_ms, label, info)

        self._race_bucket(race_a, record).add_game(race_b)
        self._race_bucket(race_b, record).add_game(race_a)

        self.matchups[label].add_game(active_race_won)
        if not mirror:
            self.races[race_winner].add_result_vs_other(True)
            self.races[race_loser].add_result_vs_other(False)
            if active_race_won:
                self.status.active_race_won += 1
            else:
                self.status.passive_race_won += 1

        map_bucket.add_game(label, active_race_won)
        tier.add_game(label, active_race_won)

    def add_cast_groups(self, groups: Iterable[TeamMatchupGroup]) -> None:
        """Count played and cast groups of the regular season."""
        for group in groups:
            if group.phase is not Phase.REGULAR:
                continue
            for tier in group.tiers:
                self.general.add_cast_group(group.week, tier.tier, tier.was_cast)
                for alias in group.teams:
                    self._team_bucket(alias).add_cast_group(tier.was_cast)

    def set_team_win_rates(self, alias: str, win_rates: TeamWinRates) -> None:
        self._team_bucket(alias).set_win_rates(win_rates)

    def check_consistency(self) -> None:
        """Every counted game appears once per matchup and map, twice per race."""
        matchup_games = sum(bucket.games_played for bucket in self.matchups.values())
        race_sides = sum(sum(bucket.games_vs.values()) for bucket in self.races.values())
        map_games = sum(bucket.games_played for bucket in self.maps.values())
        known = self.status.known_winner
        if race_sides != 2 * matchup_games or not matchup_games == known == map_games:
            raise StatsIntegrityError(
                "numbers don't add up: "
                f"matchup_games={matchup_games} race_sides={race_sides} "
                f"known_winner={known} map_games={map_games}"
            )

    def finalize(self, misc: SeasonMiscData | None = None) -> SeasonStats:
        self.check_consistency()
        matchups = {label: bucket.finalize() for label, bucket in self.matchups.items()}
        matchup_ratios = {label: stats.ratio for label, stats in matchups.items()}
        most_improved = misc.most_improved_players if misc is not None else {}
        return SeasonStats(
            general=self.general.finalize(total_games=self.total_games),
            tiers={tier: bucket.finalize() for tier, bucket in self.tiers.items()},
            teams={
                alias: bucket.finalize(most_improved_players=most_improved.get(alias))
                for alias, bucket in self.teams.items()
            },
            maps={name: bucket.finalize(matchup_ratios) for name, bucket in self.maps.items()},
            matchups=matchups,
            races={race: bucket.finalize() for race, bucket in self.races.items()},
            match_status=self.status,
        )

    def _tier_bucket(self, replay: FlatReplay) -> TierBucket:
        if replay.tier not in self.tiers:
            raise ValueError(
                f"{replay.record.filename}: tier {replay.tier} is outside the "
                f"{len(self.tiers)} configured tiers"
            )
        return self.tiers[replay.tier]

    def _map_bucket(self, record: ReplayRecord) -> MapBucket:
        name = normalize_map_name(record.map_name, self.map_aliases)
        if name not in self.maps:
            raise ValueError(f"{record.filename}: map {name!r} is not in the collected map names")
        return self.maps[name]

    def _team_bucket(self, alias: str) -> TeamBucket:
        if alias not in self.teams:
            raise KeyError(f"season {self.season.season_number} has no team with alias {alias!r}")
        return self.teams[alias]

    def _race_bucket(self, race: str, record: ReplayRecord) -> RaceBucket:
        if race not in self.races:
            raise ValueError(f"{record.filename}: unknown race {race!r}")
        return self.races[race]


def extract_team_stats(
    season: SeasonRecord,
    misc: SeasonMiscData,
    weeks: Sequence[TeamMatchupGroup],
    replays: Sequence[FlatReplay],
    maps: Sequence[str],
    results: SeasonResults,
    *,
    config: AnalysisConfig,
    race_resolver: RaceResolver,
) -> SeasonStats:
    """Run the replay, cast coverage and team win rate passes and finalise."""
    accumulator = StatsAccumulator(
        season,
        maps,
        ignored_frame_counts=config.ignored_frame_counts,
        map_aliases=config.map_aliases,
        tier_count=config.tier_count,
    )
    accumulator.add_replays(replays)
    accumulator.add_cast_groups(weeks)
    for team in season.teams:
        accumulator.set_team_win_rates(
            team.alias,
            get_team_win_rates(team, results, season.season_number, race_resolver),
        )
    return accumulator.finalize(misc)


__all__ = [
    "FlatReplay",
    "MatchStatus",
    "SeasonStats",
    "StatsAccumulator",
    "StatsIntegrityError",
    "collect_map_names",
    "extract_team_stats",
    "flatten_replays",
]
