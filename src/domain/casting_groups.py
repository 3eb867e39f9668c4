"""Markdown overview of casting groups: playtime and matchups per tier."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import replace

from domain.formatting import ms_to_duration
from replays.index import MatchupInfo, TeamMatchupGroup, TierGroup


def format_races(race_counts: Mapping[str, int]) -> str:
    return ", ".join(f"{matchup}: {amount}" for matchup, amount in race_counts.items())


def format_playtime(duration_ms: int) -> str:
    return ms_to_duration(duration_ms, omit_days=True, omit_ms=True)


def format_tier_line(tier: TierGroup) -> str:
    line = (
        f"• **Tier {tier.tier}** - playtime: {format_playtime(tier.duration_ms)}, "
        f"matchups: {format_races(tier.race_counts)}"
    )
    if tier.cast_status is not None and tier.cast_status.was_cast:
        line += " (cast)"
    return line


def format_casting_groups(groups: Sequence[TeamMatchupGroup]) -> str:
    buffer = []
    for group in groups:
        buffer.append(f"\nWeek {group.week}, **{group.teams[0]}** vs **{group.teams[1]}**\n")
        buffer.extend(format_tier_line(tier) for tier in group.tiers)
    return "\n".join(buffer).strip()


def format_static_sections(sections: Mapping[str, MatchupInfo]) -> str:
    """One line per non-weekly section, e.g. a showmatch directory."""
    return "\n".join(
        f"• **{name}** - playtime: {format_playtime(info.duration_ms)}, replays: {len(info.replays)}"
        for name, info in sections.items()
    )


def filter_uncast(groups: Iterable[TeamMatchupGroup]) -> list[TeamMatchupGroup]:
    """Keep only tiers without a VOD; groups left without tiers are dropped."""
    filtered = []
    for group in groups:
        tiers = tuple(tier for tier in group.tiers if not tier.was_cast)
        if tiers:
            filtered.append(replace(group, tiers=tiers))
    return filtered


__all__ = [
    "filter_uncast",
    "format_casting_groups",
    "format_playtime",
    "format_races",
    "format_static_sections",
    "format_tier_line",
]
