"""Season data and replay cache repository helpers."""

from repositories.replay_cache_repository import (
    count_replay_cache_entries,
    ensure_replay_cache_schema,
    fetch_replay_cache_entries,
    insert_replay_cache_entries,
)
from repositories.season_repository import DataPaths, ResultRepository

__all__ = [
    "DataPaths",
    "ResultRepository",
    "count_replay_cache_entries",
    "ensure_replay_cache_schema",
    "fetch_replay_cache_entries",
    "insert_replay_cache_entries",
]
