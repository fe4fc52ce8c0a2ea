"""
Appliance Catalog
=================

Appliances a user can pick, with their electrical characteristics and
default usage pattern.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from ..config import APPLIANCES_PATH


# Preselected for a new session; these run around the clock
IDLE_DRAW_IDS = (
    "vitrifrigo_dp150i",
    "victron_3k_inverter_idle",
    "cerbo_gx",
    "smartshunt",
    "halo_rear_cam",
)


@dataclass(frozen=True)
class Appliance:
    """
    Catalog entry for one appliance.

    Attributes:
        id: Stable identifier used as the persistence key
        label: Display name
        category: Grouping shown in the selector
        running_watts: Continuous draw while running (W)
        starting_watts: Surge draw at start-up (W)
        has_quantity: Whether the user may pick more than one
        needs_duty_cycle: Whether the appliance cycles on/off (fridge, AC)
        default_duty_cycle: Fraction of time drawing running watts
        hours_per_day: Fixed default daily hours (always-on items)
        idle_draw: Listed under "Idle Draw"
    """
    id: str
    label: str
    category: str
    running_watts: float
    starting_watts: float
    has_quantity: bool = False
    needs_duty_cycle: bool = False
    default_duty_cycle: Optional[float] = None
    hours_per_day: Optional[float] = None
    idle_draw: bool = False

    def __post_init__(self):
        if self.running_watts < 0:
            raise ValueError(f"{self.id}: running_watts must be >= 0")
        if self.starting_watts < 0:
            raise ValueError(f"{self.id}: starting_watts must be >= 0")
        if self.default_duty_cycle is not None and not (0 <= self.default_duty_cycle <= 1):
            raise ValueError(f"{self.id}: default_duty_cycle must be between 0 and 1")
        if self.hours_per_day is not None and not (0 <= self.hours_per_day <= 24):
            raise ValueError(f"{self.id}: hours_per_day must be between 0 and 24")

    @property
    def default_hours(self) -> float:
        """Hours per day assumed until the user changes it."""
        if self.hours_per_day is not None:
            return float(self.hours_per_day)
        return 24.0 if self.needs_duty_cycle else 1.0

    @property
    def default_duty(self) -> float:
        if self.default_duty_cycle is not None:
            return float(self.default_duty_cycle)
        return 1.0

    @property
    def duty_cycle_hint(self) -> str:
        if "refrigerator" in self.id or "frig" in self.id:
            return f"Refrigerators cycle on/off. Default: {self.default_duty:.0%}"
        return f"Furnaces and AC units cycle on/off. Default: {self.default_duty:.0%}"

    @classmethod
    def from_dict(cls, data: dict) -> "Appliance":
        running = float(data["runningWatts"])
        return cls(
            id=data["id"],
            label=data["label"],
            category=data.get("category", "Other"),
            running_watts=running,
            starting_watts=float(data.get("startingWatts", running)),
            has_quantity=bool(data.get("hasQuantity", False)),
            needs_duty_cycle=bool(data.get("needsDutyCycle", False)),
            default_duty_cycle=data.get("defaultDutyCycle"),
            hours_per_day=data.get("hoursPerDay"),
            idle_draw=bool(data.get("idleDraw", False)),
        )

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "label": self.label,
            "category": self.category,
            "runningWatts": self.running_watts,
            "startingWatts": self.starting_watts,
            "hasQuantity": self.has_quantity,
            "needsDutyCycle": self.needs_duty_cycle,
            "idleDraw": self.idle_draw,
        }
        if self.default_duty_cycle is not None:
            data["defaultDutyCycle"] = self.default_duty_cycle
        if self.hours_per_day is not None:
            data["hoursPerDay"] = self.hours_per_day
        return data


class ApplianceCatalog:
    """Ordered, id-indexed collection of appliances."""

    def __init__(self, appliances: List[Appliance]):
        self._appliances = list(appliances)
        self._by_id: Dict[str, Appliance] = {}
        for appliance in self._appliances:
            if appliance.id in self._by_id:
                raise ValueError(f"Duplicate appliance id: {appliance.id}")
            self._by_id[appliance.id] = appliance

    def __iter__(self) -> Iterator[Appliance]:
        return iter(self._appliances)

    def __len__(self) -> int:
        return len(self._appliances)

    def __contains__(self, appliance_id: object) -> bool:
        return appliance_id in self._by_id

    def get(self, appliance_id: str) -> Optional[Appliance]:
        return self._by_id.get(appliance_id)

    def __getitem__(self, appliance_id: str) -> Appliance:
        try:
            return self._by_id[appliance_id]
        except KeyError:
            raise KeyError(f"Unknown appliance: {appliance_id}") from None

    @property
    def idle_draw(self) -> List[Appliance]:
        return [a for a in self._appliances if a.id in IDLE_DRAW_IDS]

    @property
    def regular(self) -> List[Appliance]:
        return [a for a in self._appliances if a.id not in IDLE_DRAW_IDS]

    def by_category(self) -> Dict[str, List[Appliance]]:
        """Group the non-idle appliances by category, keeping catalog order."""
        groups: Dict[str, List[Appliance]] = {}
        for appliance in self.regular:
            groups.setdefault(appliance.category, []).append(appliance)
        return groups


def read_catalog(path: Path) -> ApplianceCatalog:
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    return ApplianceCatalog([Appliance.from_dict(item) for item in raw])


@lru_cache(maxsize=1)
def load_catalog() -> ApplianceCatalog:
    """Load the packaged appliance catalog."""
    return read_catalog(APPLIANCES_PATH)
