"""Load the replay analysis configuration from a TOML file."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
import tomllib

ROOT_DIR = Path(__file__).resolve().parents[2]

DEFAULT_IGNORED_FRAME_COUNTS = (644, 1032)
DEFAULT_MAP_ALIASES = {
    "Untitled Scenario": "Butter",
    "Bombasticlipse": "Eclipse",
    "Sylphid": "Neo Sylphid",
}
DEFAULT_SCREP_PATH = Path.home() / "go/bin/screp"
DEFAULT_FRAME_MS = 42
DEFAULT_TIER_COUNT = 4


@dataclass(frozen=True)
class AnalysisConfig:
    """Settings for one replay analysis run."""

    data_dir: Path
    cache_dir: Path
    screp_path: Path = DEFAULT_SCREP_PATH
    cache_url: str | None = None
    frame_ms: int = DEFAULT_FRAME_MS
    ignored_frame_counts: tuple[int, ...] = DEFAULT_IGNORED_FRAME_COUNTS
    map_aliases: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_MAP_ALIASES))
    tier_count: int = DEFAULT_TIER_COUNT
    use_real_matches: bool = False
    file_path: Path | None = None

    def replay_cache_file(self, season: int) -> Path:
        return self.cache_dir / f"s{season}-replays.json"


def default_analysis_config() -> AnalysisConfig:
    data_dir = ROOT_DIR / "data"
    return AnalysisConfig(data_dir=data_dir, cache_dir=data_dir / "cache")


def load_analysis_config(config_path: Path | None = None) -> AnalysisConfig:
    """Load and validate an analysis config; defaults apply without a file."""
    if config_path is None:
        return default_analysis_config()
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    if not config_path.is_file():
        raise IsADirectoryError(f"Config path is not a file: {config_path}")

    with config_path.open("rb") as file:
        raw = tomllib.load(file)
    return _parse_analysis_config(raw, config_path)


def _parse_analysis_config(raw: dict[str, Any], file_path: Path) -> AnalysisConfig:
    paths_raw = raw.get("paths", {})
    replays_raw = raw.get("replays", {})
    stats_raw = raw.get("stats", {})
    base_dir = file_path.parent

    data_dir = _resolve_path(base_dir, paths_raw.get("data_dir", "data"))
    cache_dir = _resolve_path(base_dir, paths_raw.get("cache_dir", data_dir / "cache"))
    screp_value = paths_raw.get("screp_path")
    screp_path = DEFAULT_SCREP_PATH if screp_value is None else _resolve_path(base_dir, screp_value)

    cache_url_value = paths_raw.get("cache_url")
    cache_url = None if cache_url_value is None else str(cache_url_value).strip() or None

    ignored_raw = replays_raw.get("ignored_frame_counts", list(DEFAULT_IGNORED_FRAME_COUNTS))
    if not isinstance(ignored_raw, list):
        raise ValueError(f"{file_path}: [replays].ignored_frame_counts must be a list")

    aliases_raw = replays_raw.get("map_aliases", DEFAULT_MAP_ALIASES)
    if not isinstance(aliases_raw, dict):
        raise ValueError(f"{file_path}: [replays].map_aliases must be a table")

    config = AnalysisConfig(
        data_dir=data_dir,
        cache_dir=cache_dir,
        screp_path=screp_path,
        cache_url=cache_url,
        frame_ms=int(replays_raw.get("frame_ms", DEFAULT_FRAME_MS)),
        ignored_frame_counts=tuple(int(value) for value in ignored_raw),
        map_aliases={str(key): str(value) for key, value in aliases_raw.items()},
        tier_count=int(stats_raw.get("tier_count", DEFAULT_TIER_COUNT)),
        use_real_matches=bool(stats_raw.get("use_real_matches", False)),
        file_path=file_path,
    )
    _validate_config(file_path=file_path, config=config)
    return config


def _resolve_path(base_dir: Path, value: str | Path) -> Path:
    path = Path(value).expanduser()
    if path.is_absolute():
        return path
    return (base_dir / path).resolve()


def _validate_config(*, file_path: Path, config: AnalysisConfig) -> None:
    if config.frame_ms <= 0:
        raise ValueError(f"{file_path}: [replays].frame_ms must be > 0")
    if any(frames <= 0 for frames in config.ignored_frame_counts):
        raise ValueError(f"{file_path}: [replays].ignored_frame_counts must contain positive frame counts")
    if config.tier_count <= 0:
        raise ValueError(f"{file_path}: [stats].tier_count must be > 0")


__all__ = [
    "AnalysisConfig",
    "DEFAULT_IGNORED_FRAME_COUNTS",
    "DEFAULT_MAP_ALIASES",
    "default_analysis_config",
    "load_analysis_config",
]
