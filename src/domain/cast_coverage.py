"""Decide which casting groups were covered by a published VOD."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import replace
from typing import Any

from domain.common import CastGroupStatus, CastingSection, SeasonRecord, VodRecord
from replays.index import TeamMatchupGroup


def get_group_cast_status(
    section_meta: CastingSection | Mapping[str, Any] | None,
    tier: int,
    week: int,
    team_a: str,
    team_b: str,
    vods: Sequence[VodRecord],
    season: SeasonRecord,
) -> CastGroupStatus:
    """Return the VODs covering one (season, week, tier, team pair) group.

    `team_a` and `team_b` are team aliases; VOD metadata uses full team
    names. Every predicate must hold for a VOD to count.
    """
    team_names = (season.team_by_alias(team_a).name, season.team_by_alias(team_b).name)
    meta_match = _meta_match_of(section_meta)

    matching = tuple(
        vod
        for vod in vods
        if _matches_group(
            vod,
            season_number=season.season_number,
            week=week,
            tier=tier,
            team_names=team_names,
            meta_match=meta_match,
        )
    )
    return CastGroupStatus(was_cast=bool(matching), vods=matching)


def find_group_vods(
    vods: Iterable[VodRecord],
    group_number: int,
    season_number: int,
    week_number: int,
) -> list[VodRecord]:
    """Return the preseason VODs covering a given (week, group)."""
    return [
        vod
        for vod in vods
        if vod.meta.is_preseason
        and vod.meta.season == season_number
        and not vod.meta.is_showmatch
        and not vod.meta.is_hype_video
        and (week_number, group_number) in vod.meta.groups
    ]


def attach_cast_status(
    groups: Iterable[TeamMatchupGroup],
    sections: Sequence[CastingSection],
    vods: Sequence[VodRecord],
    season: SeasonRecord,
) -> list[TeamMatchupGroup]:
    """Return the groups with the cast status of every tier filled in.

    Groups whose phase has no weekly casting section are returned unchanged.
    """
    sections_by_name = {section.name: section for section in sections if section.weekly}
    resolved = []
    for group in groups:
        section = sections_by_name.get(group.phase.value)
        if section is None:
            resolved.append(group)
            continue
        tiers = tuple(
            replace(
                tier,
                cast_status=get_group_cast_status(
                    section,
                    tier.tier,
                    group.week,
                    group.teams[0],
                    group.teams[1],
                    vods,
                    season,
                ),
            )
            for tier in group.tiers
        )
        resolved.append(replace(group, tiers=tiers))
    return resolved


def _meta_match_of(section_meta: CastingSection | Mapping[str, Any] | None) -> Mapping[str, Any]:
    if section_meta is None:
        return {}
    if isinstance(section_meta, CastingSection):
        return section_meta.meta_match
    return section_meta


def _matches_group(
    vod: VodRecord,
    *,
    season_number: int,
    week: int,
    tier: int,
    team_names: tuple[str, str],
    meta_match: Mapping[str, Any],
) -> bool:
    meta = vod.meta
    if meta.season != season_number or meta.week != week:
        return False
    if tier not in meta.tiers:
        return False
    if not all(name in meta.team_matchup for name in team_names):
        return False

    fields = meta.as_match_fields()
    for key, expected in meta_match.items():
        if key not in fields:
            raise KeyError(f"unknown VOD meta field in section match: {key!r}")
        if fields[key] != expected:
            return False
    return True


__all__ = [
    "attach_cast_status",
    "find_group_vods",
    "get_group_cast_status",
]
