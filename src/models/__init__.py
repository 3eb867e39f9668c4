"""ORM models."""

from models.base import Base
from models.replay_cache import ReplayCacheEntry

__all__ = [
    "Base",
    "ReplayCacheEntry",
]
