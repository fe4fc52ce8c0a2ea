"""
Deficit suggestions.

Given the deficit left after solar and the battery bank, point the user at
the smallest change that closes it: a bigger solar option when one is big
enough, otherwise more batteries.
"""

from __future__ import annotations

import math
from typing import Dict, Optional, Sequence

import numpy as np

from ..catalog.battery import load_battery_spec
from ..catalog.regions import get_peak_sun_hours
from ..catalog.solar import load_solar_spec
from .calculations import SYSTEM_VOLTAGE, round_half_up
from .models import Suggestion


def get_deficit_after_adding_solar(
    final_energy_deficit_ah: float,
    current_solar_watts: float,
    new_solar_watts: float,
    region: Optional[str],
    season: Optional[str],
    system_voltage: float = SYSTEM_VOLTAGE,
) -> float:
    """
    Deficit after switching the array from ``current_solar_watts`` to
    ``new_solar_watts``. The new option replaces the current one.
    """
    psh = get_peak_sun_hours(region, season)
    delta_ah = (float(new_solar_watts) - float(current_solar_watts)) * psh / system_voltage
    return final_energy_deficit_ah - delta_ah


def solar_option_suggestions(
    final_energy_deficit_ah: float,
    current_solar_watts: float,
    region: Optional[str],
    season: Optional[str],
    options: Optional[Sequence[int]] = None,
    system_voltage: float = SYSTEM_VOLTAGE,
) -> Dict[int, Suggestion]:
    """
    Hint for each solar toggle option.

    Only produced while a deficit exists, and never for the option already
    selected. ``solves`` when switching closes the deficit, otherwise
    ``helps`` with the remaining deficit.
    """
    if final_energy_deficit_ah <= 0:
        return {}
    options = np.asarray(options if options is not None else load_solar_spec().options, dtype=float)
    options = options[options != float(current_solar_watts)]
    if options.size == 0:
        return {}

    psh = get_peak_sun_hours(region, season)
    deficits = final_energy_deficit_ah - (options - float(current_solar_watts)) * psh / system_voltage

    hints: Dict[int, Suggestion] = {}
    for watts, deficit in zip(options, deficits):
        watts = int(watts)
        deficit = float(deficit)
        if deficit <= 0:
            hints[watts] = Suggestion(
                kind="solves",
                message="This solves your deficit",
                solar_watts=watts,
                deficit_after_ah=round_half_up(deficit, 1),
            )
        else:
            hints[watts] = Suggestion(
                kind="helps",
                message=f"Add this: Deficit becomes {abs(deficit):.1f} Ah",
                solar_watts=watts,
                deficit_after_ah=round_half_up(deficit, 1),
            )
    return hints


def get_min_solution_suggestion(
    final_energy_deficit_ah: float,
    solar_watts: float,
    battery_count: int,
    region: Optional[str],
    season: Optional[str],
    options: Optional[Sequence[int]] = None,
    usable_ah_per_battery: Optional[float] = None,
    system_voltage: float = SYSTEM_VOLTAGE,
) -> Optional[Suggestion]:
    """
    Smallest single change that closes the deficit.

    Two branches: the smallest solar option whose extra harvest covers the
    deficit, if any option is large enough; otherwise enough additional
    batteries to absorb it.
    """
    if final_energy_deficit_ah <= 0:
        return None

    options = np.asarray(options if options is not None else load_solar_spec().options, dtype=float)
    psh = get_peak_sun_hours(region, season)
    extra_ah = (options - float(solar_watts)) * psh / system_voltage
    solving = options[(options > float(solar_watts)) & (extra_ah >= final_energy_deficit_ah)]

    if solving.size:
        target = int(solving.min())
        return Suggestion(
            kind="solar",
            message=(
                f"Switch to {target}W of solar to cover the remaining "
                f"{final_energy_deficit_ah:.1f} Ah deficit"
            ),
            solar_watts=target,
        )

    usable = usable_ah_per_battery if usable_ah_per_battery is not None else load_battery_spec().usable_ah
    extra = int(math.ceil(final_energy_deficit_ah / usable))
    total = int(battery_count) + extra
    plural = "battery" if extra == 1 else "batteries"
    return Suggestion(
        kind="battery",
        message=(
            f"Add {extra} {plural} ({total} total) to cover the remaining "
            f"{final_energy_deficit_ah:.1f} Ah deficit"
        ),
        additional_batteries=extra,
    )
