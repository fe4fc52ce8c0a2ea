"""
Charging Hardware
=================

Alternator (Orion XS DC-DC), generator and shore-power charging parameters.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple

from ..config import CHARGING_PATH


@dataclass(frozen=True)
class ShoreSource:
    id: str
    label: str
    amps: float


@dataclass(frozen=True)
class ChargingHardware:
    """
    Attributes:
        orion_options: Selectable Orion XS charge rates (A); 0 means not installed
        generator_label: Generator model name
        generator_amps: DC charge current while the generator runs (A)
        shore_charger_label: Inverter/charger used on shore power
        shore_charger_max_amps: Charger DC output ceiling (A)
        shore_charger_efficiency: AC to DC conversion efficiency
        ac_voltage: Shore supply voltage (V)
        continuous_derate: Fraction of breaker rating usable continuously
        shore_sources: Supported shore connections
    """
    orion_options: Tuple[int, ...]
    generator_label: str
    generator_amps: float
    shore_charger_label: str
    shore_charger_max_amps: float
    shore_charger_efficiency: float
    ac_voltage: float
    continuous_derate: float
    shore_sources: Tuple[ShoreSource, ...]

    def __post_init__(self):
        if self.generator_amps <= 0:
            raise ValueError("generator_amps must be positive")
        if not (0 < self.shore_charger_efficiency <= 1):
            raise ValueError("shore_charger_efficiency must be between 0 and 1")
        if not (0 < self.continuous_derate <= 1):
            raise ValueError("continuous_derate must be between 0 and 1")


@lru_cache(maxsize=1)
def load_charging_hardware() -> ChargingHardware:
    with open(CHARGING_PATH, "r", encoding="utf-8") as f:
        raw = json.load(f)
    shore = raw["shoreCharger"]
    return ChargingHardware(
        orion_options=tuple(int(a) for a in raw["orionOptions"]),
        generator_label=raw["generator"]["label"],
        generator_amps=float(raw["generator"]["chargerAmps"]),
        shore_charger_label=shore["label"],
        shore_charger_max_amps=float(shore["maxChargeAmps"]),
        shore_charger_efficiency=float(shore["efficiency"]),
        ac_voltage=float(shore["acVoltage"]),
        continuous_derate=float(shore["continuousDerate"]),
        shore_sources=tuple(
            ShoreSource(id=s["id"], label=s["label"], amps=float(s["amps"]))
            for s in raw["shoreSources"]
        ),
    )
