"""Persistence helpers for the replay cache table using SQLAlchemy."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy import func, insert, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from models import Base, ReplayCacheEntry


def ensure_replay_cache_schema(engine: Engine) -> None:
    """Create the replay_cache table and its indexes if they do not exist."""
    Base.metadata.create_all(bind=engine, tables=[ReplayCacheEntry.__table__])


def fetch_replay_cache_entries(session: Session, namespace: str) -> dict[str, dict[str, Any] | None]:
    """Return every cached payload of a namespace keyed by relative path."""
    statement = (
        select(ReplayCacheEntry.path, ReplayCacheEntry.is_replay, ReplayCacheEntry.payload)
        .where(ReplayCacheEntry.namespace == namespace)
        .order_by(ReplayCacheEntry.path)
    )
    entries: dict[str, dict[str, Any] | None] = {}
    for row in session.execute(statement).mappings():
        entries[row["path"]] = row["payload"] if row["is_replay"] else None
    return entries


def insert_replay_cache_entries(
    session: Session,
    namespace: str,
    entries: Mapping[str, dict[str, Any] | None],
) -> int:
    """Insert entries whose path is not cached yet; existing rows are never rewritten."""
    if not entries:
        return 0

    existing = set(
        session.scalars(
            select(ReplayCacheEntry.path).where(
                ReplayCacheEntry.namespace == namespace,
                ReplayCacheEntry.path.in_(list(entries)),
            )
        )
    )
    payload = [
        {
            "namespace": namespace,
            "path": path,
            "is_replay": data is not None,
            "payload": data,
        }
        for path, data in entries.items()
        if path not in existing
    ]
    if payload:
        session.execute(insert(ReplayCacheEntry), payload)
    return len(payload)


def count_replay_cache_entries(session: Session, namespace: str | None = None) -> int:
    statement = select(func.count(ReplayCacheEntry.id))
    if namespace is not None:
        statement = statement.where(ReplayCacheEntry.namespace == namespace)
    return int(session.scalar(statement) or 0)


__all__ = [
    "count_replay_cache_entries",
    "ensure_replay_cache_schema",
    "fetch_replay_cache_entries",
    "insert_replay_cache_entries",
]
