"""Hotspot aggregation and language statistics.

A hotspot is a file ranked by how often it changes.  Two scoring variants
exist:

* basic — ``score = changes``, used when commits carry no diff stats;
* enhanced — ``score = changes * ln(additions + deletions + 1)``, which lets
  a file touched many times with small diffs outrank a file touched once
  with a huge one, without growing linearly in diff size.

Ranking uses a stable sort, so equal scores keep first-seen order.
"""

from __future__ import annotations

import math
from typing import Iterable, Mapping

from repo_onboarding.domain.entities import Commit, FileChangeStat, Hotspot, LanguageStat

HOTSPOT_LIMIT = 10


def aggregate_file_changes(commits: Iterable[Commit]) -> dict[str, FileChangeStat]:
    """Accumulate per-filename change counts over *commits*."""
    stats: dict[str, FileChangeStat] = {}
    for commit in commits:
        for change in commit.files:
            stat = stats.get(change.filename)
            if stat is None:
                stat = stats[change.filename] = FileChangeStat(filename=change.filename)
            stat.changes += 1
            stat.additions += change.additions
            stat.deletions += change.deletions
    return stats


def hotspot_score(stat: FileChangeStat, *, enhanced: bool) -> float:
    if not enhanced:
        return float(stat.changes)
    return stat.changes * math.log(stat.additions + stat.deletions + 1)


def rank_hotspots(
    stats: Mapping[str, FileChangeStat],
    *,
    enhanced: bool = True,
    limit: int = HOTSPOT_LIMIT,
) -> list[Hotspot]:
    """Score, sort descending and keep the top *limit* files."""
    hotspots = [
        Hotspot(
            file=stat.filename,
            score=hotspot_score(stat, enhanced=enhanced),
            changes=stat.changes,
            additions=stat.additions if enhanced else None,
            deletions=stat.deletions if enhanced else None,
        )
        for stat in stats.values()
    ]
    hotspots.sort(key=lambda h: h.score, reverse=True)
    return hotspots[:limit]


def compute_hotspots(
    commits: Iterable[Commit],
    *,
    enhanced: bool = True,
    limit: int = HOTSPOT_LIMIT,
) -> list[Hotspot]:
    return rank_hotspots(aggregate_file_changes(commits), enhanced=enhanced, limit=limit)


def compute_language_stats(languages: Mapping[str, int]) -> list[LanguageStat]:
    """Convert a ``{language: bytes}`` map into percentage stats.

    An empty map (or one totalling zero bytes) yields an empty list.
    """
    total = sum(languages.values())
    if total <= 0:
        return []
    ordered = sorted(languages.items(), key=lambda item: item[1], reverse=True)
    return [
        LanguageStat(name=name, percentage=f"{count / total * 100:.2f}", bytes=count)
        for name, count in ordered
    ]
