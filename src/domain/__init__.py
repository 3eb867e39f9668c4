"""Season statistics domain modules."""

from domain.common import Phase, ReplayRecord, SeasonRecord

__all__ = ["Phase", "ReplayRecord", "SeasonRecord"]
