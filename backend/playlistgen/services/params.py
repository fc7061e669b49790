from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..schemas.preferences import Mood, PopularityRange, PreferenceSet

logger = logging.getLogger("playlist.params")

TargetParams = Dict[str, Any]


def mood_params(mood: Mood) -> TargetParams:
    return {f"target_{name}": value / 100 for name, value in mood.defined().items()}


def popularity_params(popularity: PopularityRange) -> TargetParams:
    # the full 0-100 range is left out so an untouched slider never narrows the query
    params: TargetParams = {}
    if popularity.min > 0:
        params["min_popularity"] = popularity.min
    if popularity.max < 100:
        params["max_popularity"] = popularity.max
    return params


def decade_params(decades: Sequence[str], *, current_year: Optional[int] = None) -> TargetParams:
    years = []
    for decade in decades:
        try:
            years.append(int(str(decade).strip()))
        except (TypeError, ValueError):
            logger.warning("Ignoring malformed decade %r", decade)
    if not years:
        return {}

    year_now = current_year if current_year is not None else date.today().year
    min_year = min(years)
    max_year = min(max(years) + 9, year_now)
    return {
        "min_release_date": f"{min_year:04d}-01-01",
        "max_release_date": f"{max_year:04d}-12-31",
    }


def build_target_params(preferences: PreferenceSet, *, current_year: Optional[int] = None) -> TargetParams:
    params: TargetParams = {}
    params.update(mood_params(preferences.mood))
    params.update(popularity_params(preferences.popularity))
    params.update(decade_params(preferences.decades, current_year=current_year))
    return params
