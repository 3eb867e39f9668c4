"""Race letters, matchup labels and the favoured-race cycle."""

from __future__ import annotations

from collections.abc import Mapping

RACES = ("T", "Z", "P")

# Each race is listed first in the matchup where it is the "active" race.
ACTIVE_MATCHUPS = ("ZvP", "PvT", "TvZ")
MIRROR_MATCHUPS = ("ZvZ", "PvP", "TvT")
ALL_MATCHUPS = ("ZvZ", "PvP", "TvT", "ZvP", "PvT", "TvZ")
ALL_MATCHUP_PERMUTATIONS = (
    "TvT",
    "TvZ",
    "TvP",
    "ZvT",
    "ZvZ",
    "ZvP",
    "PvT",
    "PvZ",
    "PvP",
)

_FAVOURED_AGAINST = {"T": "Z", "Z": "P", "P": "T"}


def check_active_win(race_winner: str, race_loser: str) -> bool | None:
    """Return whether the "active" race won: T over Z, Z over P or P over T.

    Returns None for pairs outside the cycle (mirrors, unknown letters).
    """
    if race_winner not in _FAVOURED_AGAINST or race_loser not in _FAVOURED_AGAINST:
        return None
    if _FAVOURED_AGAINST[race_winner] == race_loser:
        return True
    if _FAVOURED_AGAINST[race_loser] == race_winner:
        return False
    return None


def sort_races(race_a: str, race_b: str) -> tuple[str, str]:
    """Order two races so that the active race comes first."""
    if _FAVOURED_AGAINST.get(race_b) == race_a:
        return (race_b, race_a)
    return (race_a, race_b)


def matchup_label(race_a: str, race_b: str) -> str:
    """Unordered matchup label, e.g. `TvZ` for both (T, Z) and (Z, T)."""
    return "v".join(sort_races(race_a, race_b))


def is_mirror(label: str) -> bool:
    first, second = label.split("v")
    return first == second


def race_letter(race: str | None) -> str | None:
    """Return T, Z or P for a race name, None for placeholders like "Race Picker"."""
    if not race:
        return None
    letter = race.strip()[:1].upper()
    return letter if letter in RACES else None


def normalize_map_name(name: str, aliases: Mapping[str, str]) -> str:
    """Map mislabelled replay map names onto their standard names."""
    return aliases.get(name, name)


__all__ = [
    "ACTIVE_MATCHUPS",
    "ALL_MATCHUPS",
    "ALL_MATCHUP_PERMUTATIONS",
    "MIRROR_MATCHUPS",
    "RACES",
    "check_active_win",
    "is_mirror",
    "matchup_label",
    "normalize_map_name",
    "race_letter",
    "sort_races",
]
