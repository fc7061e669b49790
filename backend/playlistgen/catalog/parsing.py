from __future__ import annotations

import re
from typing import Iterable, List

CATALOG_ID_RE = re.compile(r"^[A-Za-z0-9]{22}$")
TRACK_URL_RE = re.compile(
    r"https?://(?:open|play)\.spotify\.com/(?:intl-[a-z]{2}/)?track/(?P<id>[A-Za-z0-9]{22})",
    re.IGNORECASE,
)
TRACK_URI_RE = re.compile(r"^spotify:track:(?P<id>[A-Za-z0-9]{22})$", re.IGNORECASE)


def parse_track_id(value: str) -> str:
    """Accept a bare track id, a ``spotify:track:`` URI or an open.spotify.com URL."""
    value = re.sub(r"\s+", "", value or "")
    if CATALOG_ID_RE.match(value):
        return value
    m = TRACK_URI_RE.match(value) or TRACK_URL_RE.search(value)
    if not m:
        raise ValueError("unsupported track reference")
    return m.group("id")


def parse_track_ids(values: Iterable[str]) -> List[str]:
    ids: List[str] = []
    for value in values:
        track_id = parse_track_id(value)
        if track_id not in ids:
            ids.append(track_id)
    return ids


def split_track_list(raw: str) -> List[str]:
    return [part for part in (raw or "").split(",") if part.strip()]
