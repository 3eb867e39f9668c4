"""Run the `screp` replay parser and convert its output into ReplayRecords."""

from __future__ import annotations

import json
import re
import subprocess
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol

from domain.common import ReplayPlayer, ReplayRecord, ReplayTeam
from domain.config import DEFAULT_FRAME_MS

NOT_A_REPLAY_MESSAGE = "not a replay file"

# Brood War text color codes and other control characters in map titles.
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


class ReplayParseError(RuntimeError):
    """The replay parser failed for a reason other than a non-replay file."""


class NotAReplayError(ReplayParseError):
    """The file is not a replay; an expected absence, not a failure."""


class ReplayParser(Protocol):
    def parse(self, path: Path) -> ReplayRecord: ...


class ScrepParser:
    """Parses replays by invoking the `screp` binary and reading its JSON output."""

    def __init__(
        self,
        screp_path: Path,
        *,
        frame_ms: int = DEFAULT_FRAME_MS,
        timeout: float = 30.0,
    ) -> None:
        self.screp_path = screp_path
        self.frame_ms = frame_ms
        self.timeout = timeout

    def parse(self, path: Path) -> ReplayRecord:
        result = subprocess.run(
            [str(self.screp_path), str(path)],
            capture_output=True,
            text=True,
            timeout=self.timeout,
        )
        if result.returncode != 0:
            message = (result.stderr or result.stdout).strip()
            if NOT_A_REPLAY_MESSAGE in message.lower():
                raise NotAReplayError(f"{path}: {message}")
            raise ReplayParseError(f"screp failed for {path}: {message}")
        try:
            data = json.loads(result.stdout)
        except json.JSONDecodeError as exc:
            raise ReplayParseError(f"screp returned invalid JSON for {path}: {exc}") from exc
        return convert_screp_output(data, filename=path.name, frame_ms=self.frame_ms)


def clean_map_name(name: str) -> str:
    return _CONTROL_CHARS.sub("", name).strip()


def convert_screp_output(
    data: Mapping[str, Any],
    *,
    filename: str,
    frame_ms: int = DEFAULT_FRAME_MS,
) -> ReplayRecord:
    """Build a ReplayRecord from `screp` header and computed data."""
    header = data.get("Header")
    if not isinstance(header, Mapping):
        raise ReplayParseError(f"{filename}: screp output has no Header")
    computed = data.get("Computed") or {}

    frames = int(header.get("Frames", 0))
    winner_team = int(computed.get("WinnerTeam") or 0)
    descs = {int(desc["PlayerID"]): desc for desc in computed.get("PlayerDescs") or [] if "PlayerID" in desc}

    teams: dict[int, list[ReplayPlayer]] = {}
    for player in header.get("Players") or []:
        if _name_of(player.get("Type")) == "Computer":
            continue
        desc = descs.get(int(player.get("ID", -1)), {})
        teams.setdefault(int(player.get("Team", 0)), []).append(
            ReplayPlayer(
                name=str(player.get("Name", "")),
                race=_race_letter(player.get("Race")),
                apm=int(desc.get("APM", 0)),
                eapm=int(desc.get("EAPM", 0)),
                is_observer=bool(player.get("Observer", False)),
            )
        )

    return ReplayRecord(
        filename=filename,
        frames=frames,
        duration_ms=frames * frame_ms,
        map_name=clean_map_name(str(header.get("Map", ""))),
        game_type=_game_type(header.get("Type")),
        start_time=header.get("StartTime"),
        teams=tuple(
            ReplayTeam(
                index=team_number,
                is_winner=winner_team != 0 and team_number == winner_team,
                players=tuple(players),
            )
            for team_number, players in sorted(teams.items())
            if any(not player.is_observer for player in players)
        ),
    )


def _name_of(value: Any) -> str:
    if isinstance(value, Mapping):
        return str(value.get("Name", ""))
    return "" if value is None else str(value)


def _race_letter(value: Any) -> str:
    name = _name_of(value)
    return name[:1].upper() if name else "?"


def _game_type(value: Any) -> str:
    if isinstance(value, Mapping) and value.get("ShortName"):
        return str(value["ShortName"]).lower()
    return _name_of(value).lower()


__all__ = [
    "NOT_A_REPLAY_MESSAGE",
    "NotAReplayError",
    "ReplayParseError",
    "ReplayParser",
    "ScrepParser",
    "clean_map_name",
    "convert_screp_output",
]
