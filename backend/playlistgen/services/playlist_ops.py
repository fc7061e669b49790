from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Dict, List, Sequence

from ..schemas.preferences import PreferenceSet
from .generator import PlaylistGenerator

logger = logging.getLogger("playlist.ops")

Track = Dict[str, Any]


def _ids(tracks: Sequence[Track]) -> List[str]:
    return [track.get("id") for track in tracks]


def append_unique(current: Sequence[Track], batch: Sequence[Track]) -> List[Track]:
    existing = set(_ids(current))
    fresh: List[Track] = []
    for track in batch:
        track_id = track.get("id")
        if not track_id or track_id in existing:
            continue
        existing.add(track_id)
        fresh.append(track)
    return [*current, *fresh]


async def add_more(generator: PlaylistGenerator, preferences: PreferenceSet, current: Sequence[Track]) -> List[Track]:
    batch = await generator.generate(preferences)
    updated = append_unique(current, batch)
    logger.info("Added %s tracks to a playlist of %s", len(updated) - len(current), len(current))
    return updated


async def refresh(generator: PlaylistGenerator, preferences: PreferenceSet) -> List[Track]:
    return await generator.generate(preferences)


def remove_track(current: Sequence[Track], track_id: str) -> List[Track]:
    return [track for track in current if track.get("id") != track_id]


def reorder(current: Sequence[Track], new_order: Sequence[Track]) -> List[Track]:
    """Adopt the caller's ordering as-is; a sequence that is not a permutation is only logged."""
    if current and Counter(_ids(current)) != Counter(_ids(new_order)):
        logger.warning(
            "Reorder is not a permutation of the playlist (%s tracks before, %s after)",
            len(current),
            len(new_order),
        )
    return list(new_order)
