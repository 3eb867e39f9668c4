"""Walk a season's replay directory and resolve replays through the cache."""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path

from domain.common import CastGroupStatus, CastingSection, Phase, ReplayRecord, SeasonRecord
from domain.races import matchup_label
from replays.cache import ReplayCache
from replays.keys import ReplayKey, parse_tier, parse_week, split_pair
from replays.parser import NotAReplayError, ReplayParser

WEEKLY_SECTIONS = (Phase.REGULAR.value, Phase.PLAYOFFS.value)


@dataclass(frozen=True)
class MatchupInfo:
    """Replays of one player-pair directory, sorted by start time.

    The start times are None when no replay with a start time was found.
    """

    replays: tuple[ReplayRecord, ...]
    duration_ms: int
    race_matchup: str | None
    earliest_start: datetime | None
    latest_start: datetime | None


@dataclass(frozen=True)
class PlayerMatchup:
    key: ReplayKey
    info: MatchupInfo

    @property
    def players(self) -> tuple[str, str]:
        return self.key.players


@dataclass(frozen=True)
class TierGroup:
    """All matches of one tier within a team matchup: the unit that gets cast."""

    tier: int
    matchups: tuple[PlayerMatchup, ...]
    cast_status: CastGroupStatus | None = None

    @property
    def duration_ms(self) -> int:
        return sum(matchup.info.duration_ms for matchup in self.matchups)

    @property
    def race_counts(self) -> dict[str, int]:
        counts = Counter(
            matchup.info.race_matchup for matchup in self.matchups if matchup.info.race_matchup
        )
        return dict(counts)

    @property
    def was_cast(self) -> bool:
        return self.cast_status is not None and self.cast_status.was_cast


@dataclass(frozen=True)
class TeamMatchupGroup:
    """One week's matchup between two teams as found on disk."""

    phase: Phase
    week: int
    teams: tuple[str, str]
    team_names: tuple[str, str]
    tiers: tuple[TierGroup, ...]


class ReplayIndex:
    """Resolves replay files to ReplayRecords, parsing each file at most once."""

    def __init__(
        self,
        parser: ReplayParser,
        cache: ReplayCache,
        *,
        echo: Callable[[str], None] | None = None,
        progress_every: int = 100,
    ) -> None:
        self.parser = parser
        self.cache = cache
        self.echo = echo
        self.progress_every = progress_every
        self.cache_hits = 0
        self.cache_misses = 0

    def __enter__(self) -> ReplayIndex:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.flush()

    @property
    def processed_replays(self) -> int:
        return self.cache_hits + self.cache_misses

    def flush(self) -> int:
        return self.cache.flush()

    def get_replay_info(self, path: Path, root_path: Path) -> ReplayRecord | None:
        """Return the record of one replay file, or None if it is not a replay."""
        relative = path.relative_to(root_path).as_posix()
        if relative in self.cache:
            self.cache_hits += 1
            return self.cache.get(relative)

        self.cache_misses += 1
        try:
            record: ReplayRecord | None = replace(self.parser.parse(path), filename=relative)
        except NotAReplayError:
            record = None
        self.cache.put(relative, record)

        if self.echo is not None and self.processed_replays % self.progress_every == 0:
            self.echo(
                f"processed_replays={self.processed_replays} "
                f"cache_hits={self.cache_hits} cache_misses={self.cache_misses}"
            )
        return record

    def get_unsorted_replay_info(self, directory: Path, root_path: Path) -> list[ReplayRecord]:
        """Resolve every `*.rep` file of a directory, skipping non-replays."""
        records = []
        for path in sorted(directory.glob("*.rep")):
            record = self.get_replay_info(path, root_path)
            if record is not None:
                records.append(record)
        return records

    def get_matchup_info(self, directory: Path, root_path: Path) -> MatchupInfo:
        return build_matchup_info(self.get_unsorted_replay_info(directory, root_path))

    def find_replay_dir(self, key: ReplayKey, root_path: Path) -> Path | None:
        """Locate a key's directory, accepting either order of teams and players."""
        for variant in key.variants():
            directory = root_path.joinpath(*variant.relative_dir.parts)
            if directory.is_dir():
                return directory
        return None

    def resolve_unknown_race(self, known_race: str, key: ReplayKey, root_path: Path) -> str:
        """Return the race opposite `known_race` in the first replay of a match."""
        directory = self.find_replay_dir(key, root_path)
        if directory is None:
            raise FileNotFoundError(f"no replay directory for {key.relative_dir} under {root_path}")
        records = self.get_unsorted_replay_info(directory, root_path)
        if not records:
            raise FileNotFoundError(f"no replays in {directory}")
        race_a, race_b = records[0].matchup_summary.split("v")[:2]
        return race_b if race_a == known_race else race_a

    def walk_season(
        self,
        season: SeasonRecord,
        root_path: Path,
        phases: Sequence[Phase] = (Phase.REGULAR, Phase.PLAYOFFS),
    ) -> list[TeamMatchupGroup]:
        """Walk `phase/weekN/A_vs_B/tierT/a_vs_b/*.rep` below a season's replay root."""
        groups: list[TeamMatchupGroup] = []
        for phase in phases:
            phase_dir = root_path / phase.value
            if not phase_dir.is_dir():
                continue
            week_dirs = sorted(_subdirs(phase_dir, "week*"), key=lambda item: parse_week(item.name))
            for week_dir in week_dirs:
                week = parse_week(week_dir.name)
                for teams_dir in sorted(_subdirs(week_dir)):
                    groups.append(
                        self._walk_team_matchup(season, root_path, phase, week, teams_dir)
                    )
        return groups

    def _walk_team_matchup(
        self,
        season: SeasonRecord,
        root_path: Path,
        phase: Phase,
        week: int,
        teams_dir: Path,
    ) -> TeamMatchupGroup:
        dir_teams = split_pair(teams_dir.name)
        team_names = tuple(sorted(dir_teams))
        aliases = tuple(season.team_by_name(name).alias for name in team_names)

        tiers = []
        tier_dirs = sorted(_subdirs(teams_dir, "tier*"), key=lambda item: parse_tier(item.name))
        for tier_dir in tier_dirs:
            tier = parse_tier(tier_dir.name)
            matchups = []
            for players_dir in sorted(_subdirs(tier_dir)):
                key = ReplayKey(
                    season=season.season_number,
                    phase=phase,
                    week=week,
                    teams=dir_teams,
                    tier=tier,
                    players=split_pair(players_dir.name),
                )
                matchups.append(
                    PlayerMatchup(key=key, info=self.get_matchup_info(players_dir, root_path))
                )
            tiers.append(TierGroup(tier=tier, matchups=tuple(matchups)))

        return TeamMatchupGroup(
            phase=phase,
            week=week,
            teams=(aliases[0], aliases[1]),
            team_names=(team_names[0], team_names[1]),
            tiers=tuple(tiers),
        )

    def get_static_section_info(self, section_dir: Path, root_path: Path) -> MatchupInfo:
        """Tally every replay below a non-weekly section as one group."""
        records = []
        for path in sorted(section_dir.rglob("*.rep")):
            record = self.get_replay_info(path, root_path)
            if record is not None:
                records.append(record)
        return build_matchup_info(records)


def build_matchup_info(records: Iterable[ReplayRecord]) -> MatchupInfo:
    ordered = sorted(records, key=_start_sort_key)
    starts = [start for start in (_parse_start(record) for record in ordered) if start is not None]
    race_matchup = None
    for record in ordered:
        races = record.races
        if len(races) == 2:
            race_matchup = matchup_label(races[0], races[1])
    return MatchupInfo(
        replays=tuple(ordered),
        duration_ms=sum(record.duration_ms for record in ordered),
        race_matchup=race_matchup,
        earliest_start=min(starts) if starts else None,
        latest_start=max(starts) if starts else None,
    )


def get_casting_sections(root_path: Path) -> list[CastingSection]:
    """List the top-level replay sections of a season.

    `regular` and `playoffs` are weekly team matchup sections; anything else
    is a static section whose replays form a single group.
    """
    if not root_path.is_dir():
        return []
    sections = []
    for directory in sorted(_subdirs(root_path)):
        weekly = directory.name in WEEKLY_SECTIONS
        sections.append(
            CastingSection(
                name=directory.name,
                weekly=weekly,
                meta_match={"isPreseason": False} if weekly else {},
            )
        )
    return sections


def _subdirs(directory: Path, pattern: str = "*") -> list[Path]:
    return [path for path in directory.glob(pattern) if path.is_dir()]


def _parse_start(record: ReplayRecord) -> datetime | None:
    if not record.start_time:
        return None
    return datetime.fromisoformat(record.start_time)


def _start_sort_key(record: ReplayRecord) -> tuple[bool, str, str]:
    start = _parse_start(record)
    return (start is None, "" if start is None else start.isoformat(), record.filename)


__all__ = [
    "MatchupInfo",
    "PlayerMatchup",
    "ReplayIndex",
    "TeamMatchupGroup",
    "TierGroup",
    "build_matchup_info",
    "get_casting_sections",
]
