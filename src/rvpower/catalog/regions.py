"""
Regions & Seasons
=================

Peak sun hours (PSH) per region and season. Solar yield estimates multiply
array watts by these hours.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Mapping, Optional

from ..config import REGIONS_PATH

logger = logging.getLogger(__name__)


REGION_ORDER = (
    "desert_southwest",
    "new_england_northern_tier",
    "mountain_west",
    "southern_plains_sunbelt",
    "pacific_northwest",
    "southeast_gulf",
    "midatlantic",
    "northern_pacific_coastal",
)

SEASONS = ("winter", "spring", "summer", "fall", "annual")

DEFAULT_REGION = "desert_southwest"
DEFAULT_SEASON = "annual"


@dataclass(frozen=True)
class Region:
    key: str
    label: str
    psh: Mapping[str, float]

    def __post_init__(self):
        missing = [s for s in SEASONS if s not in self.psh]
        if missing:
            raise ValueError(f"{self.key}: missing peak sun hours for {', '.join(missing)}")
        for season, hours in self.psh.items():
            if hours <= 0:
                raise ValueError(f"{self.key}: peak sun hours for {season} must be positive")

    def peak_sun_hours(self, season: str) -> float:
        return float(self.psh.get(season, self.psh[DEFAULT_SEASON]))


@lru_cache(maxsize=1)
def load_regions() -> Dict[str, Region]:
    """Load packaged regions in display order."""
    with open(REGIONS_PATH, "r", encoding="utf-8") as f:
        raw = json.load(f)
    regions = {}
    for key in REGION_ORDER:
        if key in raw:
            regions[key] = Region(key=key, label=raw[key]["label"], psh=dict(raw[key]["psh"]))
    for key in raw:
        if key not in regions:
            regions[key] = Region(key=key, label=raw[key]["label"], psh=dict(raw[key]["psh"]))
    return regions


def get_peak_sun_hours(
    region: Optional[str],
    season: Optional[str],
    regions: Optional[Mapping[str, Region]] = None,
) -> float:
    """
    Peak sun hours for a region/season.

    Unknown regions fall back to the desert southwest, unknown seasons to the
    annual average.
    """
    regions = regions if regions is not None else load_regions()
    entry = regions.get(region or DEFAULT_REGION)
    if entry is None:
        logger.warning("Unknown region %r, using %s", region, DEFAULT_REGION)
        entry = regions[DEFAULT_REGION]
    if season not in SEASONS:
        if season is not None:
            logger.warning("Unknown season %r, using %s", season, DEFAULT_SEASON)
        season = DEFAULT_SEASON
    return entry.peak_sun_hours(season)
