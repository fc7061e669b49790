from __future__ import annotations

from typing import Any, Dict, List, Sequence

from .randomizer import Randomizer, fisher_yates

DEFAULT_PLAYLIST_SIZE = 30


def truncate(tracks: Sequence[Dict[str, Any]], size: int = DEFAULT_PLAYLIST_SIZE) -> List[Dict[str, Any]]:
    return list(tracks[:max(0, size)])


def finalize(
    tracks: Sequence[Dict[str, Any]],
    randomizer: Randomizer,
    size: int = DEFAULT_PLAYLIST_SIZE,
) -> List[Dict[str, Any]]:
    """Shuffle the merged pool uniformly and keep the first ``size`` tracks. The input is left untouched."""
    return truncate(fisher_yates(tracks, randomizer), size)
