"""Solar panel options and legacy sun-condition hours."""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Tuple

from ..config import SOLAR_PATH


@dataclass(frozen=True)
class SolarSpec:
    panel_watts: float
    options: Tuple[int, ...]
    sun_hours: Dict[str, float]

    def __post_init__(self):
        if self.panel_watts <= 0:
            raise ValueError("panel_watts must be positive")
        if list(self.options) != sorted(self.options):
            raise ValueError("solar options must be ascending")

    @property
    def max_watts(self) -> int:
        return max(self.options) if self.options else 0

    def choices(self, current_watts: float = 0) -> Tuple[float, ...]:
        """Selectable array sizes: none, every option, and a saved size that is not an option."""
        sizes = {0, *self.options}
        if current_watts > 0:
            sizes.add(current_watts)
        return tuple(sorted(sizes))

    def legacy_sun_hours(self, condition: str) -> float:
        """Hours for the old sunny/overcast toggle; unknown conditions count as sunny."""
        return float(self.sun_hours.get(condition, self.sun_hours["sunny"]))


@lru_cache(maxsize=1)
def load_solar_spec() -> SolarSpec:
    with open(SOLAR_PATH, "r", encoding="utf-8") as f:
        raw = json.load(f)
    return SolarSpec(
        panel_watts=float(raw["panelWatts"]),
        options=tuple(int(w) for w in raw["solarOptions"]),
        sun_hours={k: float(v) for k, v in raw["sunHours"].items()},
    )
