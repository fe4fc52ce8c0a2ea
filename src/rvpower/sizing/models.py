from __future__ import annotations

import math
from typing import List, Literal, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeFloat,
    confloat,
    conint,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from ..catalog.appliances import Appliance
from ..catalog.regions import DEFAULT_REGION, DEFAULT_SEASON


class _CamelModel(BaseModel):
    # Persisted wizard state uses camelCase keys
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, allow_inf_nan=False)


class ApplianceUsage(_CamelModel):
    appliance_id: str = Field(..., description="Catalog id.")
    label: str = Field("", description="Display name.")
    running_watts: NonNegativeFloat = Field(..., description="Running draw per unit (W).")
    starting_watts: NonNegativeFloat = Field(0.0, description="Start-up surge per unit (W).")
    quantity: int = Field(1, description="Number of units; values below 1 count as 1.")
    hours_per_day: float = Field(1.0, description="Daily hours in use, clamped to 0-24.")
    duty_cycle: float = Field(1.0, description="Fraction of in-use time drawing running watts, clamped to 0-1.")

    @field_validator("quantity", mode="before")
    @classmethod
    def _at_least_one(cls, v):
        if v is None:
            return 1
        try:
            v = int(v)
        except (TypeError, ValueError, OverflowError):
            raise ValueError(f"quantity must be a whole number, got {v!r}")
        return max(1, v)

    @field_validator("hours_per_day", mode="before")
    @classmethod
    def _clamp_hours(cls, v):
        if v is None:
            return 0.0
        try:
            v = float(v)
        except TypeError:
            raise ValueError(f"hours per day must be a number, got {v!r}")
        if not math.isfinite(v):
            raise ValueError("hours per day must be finite")
        return min(24.0, max(0.0, v))

    @field_validator("duty_cycle", mode="before")
    @classmethod
    def _clamp_duty(cls, v):
        if v is None:
            return 1.0
        try:
            v = float(v)
        except TypeError:
            raise ValueError(f"duty cycle must be a number, got {v!r}")
        if not math.isfinite(v):
            raise ValueError("duty cycle must be finite")
        return min(1.0, max(0.0, v))

    @classmethod
    def from_appliance(
        cls,
        appliance: Appliance,
        quantity: int = 1,
        hours_per_day: Optional[float] = None,
        duty_cycle: Optional[float] = None,
    ) -> "ApplianceUsage":
        """Build a usage entry, filling unset fields from the appliance defaults."""
        return cls(
            appliance_id=appliance.id,
            label=appliance.label,
            running_watts=appliance.running_watts,
            starting_watts=appliance.starting_watts,
            quantity=quantity,
            hours_per_day=appliance.default_hours if hours_per_day is None else hours_per_day,
            duty_cycle=appliance.default_duty if duty_cycle is None else duty_cycle,
        )


class SolarConfig(_CamelModel):
    solar_watts: NonNegativeFloat = Field(0.0, description="Installed array rating (W).")
    region: str = Field(DEFAULT_REGION, description="Region key for peak sun hours.")
    season: str = Field(DEFAULT_SEASON, description="Season key for peak sun hours.")

    @model_validator(mode="before")
    @classmethod
    def _migrate_sun_condition(cls, data):
        # Older sessions stored a sunny/overcast toggle instead of region/season
        if isinstance(data, dict):
            data = dict(data)
            legacy = data.pop("sunCondition", None) or data.pop("sun_condition", None)
            if legacy and "region" not in data:
                data["region"] = DEFAULT_REGION
                data["season"] = DEFAULT_SEASON
        return data

    @property
    def has_solar(self) -> bool:
        return self.solar_watts > 0


class BatteryConfig(_CamelModel):
    battery_count: conint(ge=1, le=10) = Field(1, description="Epoch 12V 460Ah batteries installed.")
    inverter_efficiency: confloat(ge=0.7, le=1.0) = Field(
        0.9, description="Inverter efficiency converting DC battery power to AC."
    )


class ChargingConfig(_CamelModel):
    orion_amps: Literal[0, 30, 50, 70] = Field(0, description="Orion XS DC-DC charge rate (A); 0 = none.")
    has_generator: bool = Field(False, description="Honda EU3200i available for charging.")


class SizingInputs(_CamelModel):
    appliances: List[ApplianceUsage] = Field(default_factory=list)
    solar: SolarConfig = Field(default_factory=SolarConfig)
    battery: BatteryConfig = Field(default_factory=BatteryConfig)
    charging: ChargingConfig = Field(default_factory=ChargingConfig)


class ApplianceLoad(BaseModel):
    appliance_id: str
    label: str
    quantity: int
    effective_watts: float
    daily_ah: float
    share: float = Field(..., description="Fraction of total daily amp-hours.")


class ShorePowerEstimate(BaseModel):
    source_id: str
    label: str
    ac_amps: float
    net_charge_amps: float
    hours_to_full: float


class Suggestion(BaseModel):
    kind: Literal["solar", "battery", "solves", "helps"]
    message: str
    solar_watts: Optional[int] = None
    additional_batteries: Optional[int] = None
    deficit_after_ah: Optional[float] = None


class SizingResults(BaseModel):
    # Load
    running_watts: int
    starting_watts: int
    daily_amp_hours: float
    appliance_loads: List[ApplianceLoad] = Field(default_factory=list)

    # Solar
    solar_watts: float
    has_solar: bool
    region: str
    season: str
    peak_sun_hours: float
    solar_ah: float
    required_solar_watts: int
    additional_solar_watts: int
    additional_solar_panels: int

    # Battery
    energy_deficit_ah: float
    final_energy_deficit_ah: float
    charge_amount_needed_to_100: float
    batteries_needed: int
    battery_count: int
    battery_bank_total_ah: float
    battery_bank_usable_ah: float

    # Charging
    has_generator: bool
    generator_hours_per_day: float
    orion_amps: int
    drive_hours_to_full: float
    shore_power: List[ShorePowerEstimate] = Field(default_factory=list)

    # Assumptions
    system_voltage: float
    usable_ah_per_battery: float
    inverter_efficiency: float

    min_solution: Optional[Suggestion] = None
    warnings: List[str] = Field(default_factory=list)
    notes: List[str] = Field(default_factory=list)

    @property
    def has_deficit(self) -> bool:
        return self.final_energy_deficit_ah > 0
