"""Persistent memoisation of parsed replays, keyed by relative replay path.

Entries are immutable once written: a path is parsed at most once and its
result (a record, or None for a non-replay file) is served from then on. New
entries are buffered and written on `flush()`.
"""

from __future__ import annotations

import json
import os
import tempfile
from collections.abc import Iterator
from pathlib import Path
from typing import Any, Protocol

from sqlalchemy.orm import Session, sessionmaker

from domain.common import ReplayRecord
from repositories.replay_cache_repository import (
    fetch_replay_cache_entries,
    insert_replay_cache_entries,
)


class ReplayCache(Protocol):
    def __contains__(self, path: object) -> bool: ...

    def get(self, path: str) -> ReplayRecord | None: ...

    def put(self, path: str, record: ReplayRecord | None) -> None: ...

    def flush(self) -> int: ...


class _BufferedReplayCache:
    """Lazy-loading in-memory view with a buffer of unwritten entries."""

    def __init__(self) -> None:
        self._entries: dict[str, dict[str, Any] | None] | None = None
        self._pending: dict[str, dict[str, Any] | None] = {}

    def _load(self) -> dict[str, dict[str, Any] | None]:
        raise NotImplementedError

    def _write(self, pending: dict[str, dict[str, Any] | None]) -> None:
        raise NotImplementedError

    @property
    def entries(self) -> dict[str, dict[str, Any] | None]:
        if self._entries is None:
            self._entries = self._load()
        return self._entries

    def __contains__(self, path: object) -> bool:
        return path in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def get(self, path: str) -> ReplayRecord | None:
        raw = self.entries[path]
        return None if raw is None else ReplayRecord.from_dict(raw)

    def put(self, path: str, record: ReplayRecord | None) -> None:
        if path in self.entries:
            raise ValueError(f"replay cache entry already exists: {path}")
        raw = None if record is None else record.to_dict()
        self.entries[path] = raw
        self._pending[path] = raw

    def flush(self) -> int:
        """Write buffered entries; returns how many were written."""
        if not self._pending:
            return 0
        pending = dict(self._pending)
        self._write(pending)
        self._pending.clear()
        return len(pending)


class JsonReplayCache(_BufferedReplayCache):
    """Cache stored as one JSON object mapping relative path to record or null.

    Concurrent runs against the same file are not safe (last writer wins).
    """

    def __init__(self, file_path: Path) -> None:
        super().__init__()
        self.file_path = file_path

    def _load(self) -> dict[str, dict[str, Any] | None]:
        if not self.file_path.exists():
            return {}
        with self.file_path.open("r", encoding="utf-8") as file:
            data = json.load(file)
        if not isinstance(data, dict):
            raise ValueError(f"{self.file_path}: replay cache must be a JSON object")
        return data

    def _write(self, pending: dict[str, dict[str, Any] | None]) -> None:
        self.file_path.parent.mkdir(parents=True, exist_ok=True)
        descriptor, temp_name = tempfile.mkstemp(
            dir=self.file_path.parent,
            prefix=f".{self.file_path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(descriptor, "w", encoding="utf-8") as file:
                json.dump(self.entries, file, indent=2, sort_keys=True)
            os.replace(temp_name, self.file_path)
        except BaseException:
            Path(temp_name).unlink(missing_ok=True)
            raise


class SqlReplayCache(_BufferedReplayCache):
    """Cache stored in the replay_cache table, one namespace per season."""

    def __init__(self, session_factory: sessionmaker[Session], namespace: str) -> None:
        super().__init__()
        self.session_factory = session_factory
        self.namespace = namespace

    def _load(self) -> dict[str, dict[str, Any] | None]:
        with self.session_factory() as session:
            return fetch_replay_cache_entries(session, self.namespace)

    def _write(self, pending: dict[str, dict[str, Any] | None]) -> None:
        with self.session_factory() as session:
            with session.begin():
                insert_replay_cache_entries(session, self.namespace, pending)


def season_namespace(season: int) -> str:
    return f"s{season}"


__all__ = [
    "JsonReplayCache",
    "ReplayCache",
    "SqlReplayCache",
    "season_namespace",
]
