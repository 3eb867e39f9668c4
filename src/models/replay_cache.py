"""replay_cache table model."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Index, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class ReplayCacheEntry(Base):
    """Parsed replay data keyed by namespace (season) and relative replay path.

    `payload` is NULL for files the parser reported as not being replays.
    """

    __tablename__ = "replay_cache"
    __table_args__ = (
        UniqueConstraint("namespace", "path", name="uq_replay_cache_namespace_path"),
        Index("idx_replay_cache_namespace", "namespace"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    namespace: Mapped[str] = mapped_column(String(64), nullable=False)
    path: Mapped[str] = mapped_column(String(512), nullable=False)
    is_replay: Mapped[bool] = mapped_column(Boolean, nullable=False)
    payload: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        server_default=func.now(),
    )
