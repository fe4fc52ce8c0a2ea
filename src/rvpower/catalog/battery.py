"""
Battery Spec
============

The house battery every calculation assumes: one Epoch 12V 460Ah
LiFePO4 module, 90% usable.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache

from ..config import BATTERY_PATH


@dataclass(frozen=True)
class BatterySpec:
    """
    Per-battery capacity.

    Attributes:
        label: Display name
        voltage: Nominal system voltage (V)
        total_ah: Rated capacity (Ah)
        usable_ah: Capacity available within the allowed depth of discharge (Ah)
    """
    label: str
    voltage: float
    total_ah: float
    usable_ah: float

    def __post_init__(self):
        if self.voltage <= 0:
            raise ValueError("voltage must be positive")
        if self.total_ah <= 0:
            raise ValueError("total_ah must be positive")
        if not (0 < self.usable_ah <= self.total_ah):
            raise ValueError("usable_ah must be in (0, total_ah]")

    @property
    def depth_of_discharge(self) -> float:
        return self.usable_ah / self.total_ah

    @property
    def usable_wh(self) -> float:
        return self.usable_ah * self.voltage


@lru_cache(maxsize=1)
def load_battery_spec() -> BatterySpec:
    with open(BATTERY_PATH, "r", encoding="utf-8") as f:
        raw = json.load(f)
    return BatterySpec(
        label=raw["batteryLabel"],
        voltage=float(raw["batteryVoltage"]),
        total_ah=float(raw["totalAh"]),
        usable_ah=float(raw["usableAh"]),
    )
