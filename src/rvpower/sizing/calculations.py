"""
Calculation engine for RV power system sizing.

Every function here is a closed-form formula over plain numbers or
``ApplianceUsage`` records; nothing holds state between calls.
"""

from __future__ import annotations

import math
from typing import List, Sequence, Tuple

from .models import ApplianceLoad, ApplianceUsage

SYSTEM_VOLTAGE = 12.0
INVERTER_EFFICIENCY = 0.9
HOURS_PER_DAY = 24.0


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like a display would: halves go up, never to even."""
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


def effective_watts(item: ApplianceUsage) -> float:
    return item.running_watts * item.quantity * item.duty_cycle


def calculate_running_watts(items: Sequence[ApplianceUsage]) -> float:
    """Total running wattage, weighted by duty cycle."""
    return sum(effective_watts(item) for item in items)


def calculate_starting_watts(items: Sequence[ApplianceUsage]) -> float:
    """Largest single start-up surge (starting watts x quantity); 0 if nothing selected."""
    return max([item.starting_watts * item.quantity for item in items], default=0.0)


def watts_to_amps(watts: float, system_voltage: float = SYSTEM_VOLTAGE) -> float:
    return watts / system_voltage


def appliance_amp_hours(
    item: ApplianceUsage,
    system_voltage: float = SYSTEM_VOLTAGE,
    inverter_efficiency: float = INVERTER_EFFICIENCY,
) -> float:
    """(running watts x quantity x duty cycle x hours) / (voltage x inverter efficiency)"""
    return (effective_watts(item) * item.hours_per_day) / (system_voltage * inverter_efficiency)


def calculate_daily_amp_hours(
    items: Sequence[ApplianceUsage],
    system_voltage: float = SYSTEM_VOLTAGE,
    inverter_efficiency: float = INVERTER_EFFICIENCY,
) -> float:
    return sum(appliance_amp_hours(item, system_voltage, inverter_efficiency) for item in items)


def appliance_breakdown(
    items: Sequence[ApplianceUsage],
    system_voltage: float = SYSTEM_VOLTAGE,
    inverter_efficiency: float = INVERTER_EFFICIENCY,
) -> List[ApplianceLoad]:
    """Daily amp-hours per selected appliance, in selection order."""
    loads = [appliance_amp_hours(item, system_voltage, inverter_efficiency) for item in items]
    total = sum(loads)
    return [
        ApplianceLoad(
            appliance_id=item.appliance_id,
            label=item.label or item.appliance_id,
            quantity=item.quantity,
            effective_watts=round_half_up(effective_watts(item), 1),
            daily_ah=round_half_up(ah, 1),
            share=(ah / total) if total > 0 else 0.0,
        )
        for item, ah in zip(items, loads)
    ]


def calculate_solar_ah(
    solar_watts: float,
    peak_sun_hours: float,
    system_voltage: float = SYSTEM_VOLTAGE,
) -> float:
    """Daily solar harvest: watts x peak sun hours / voltage."""
    if not solar_watts or solar_watts <= 0:
        return 0.0
    return (solar_watts * peak_sun_hours) / system_voltage


def calculate_energy_deficit(daily_ah: float, solar_ah: float) -> float:
    """Consumption left after solar; never negative."""
    return max(0.0, daily_ah - solar_ah)


def calculate_final_energy_deficit(energy_deficit_ah: float, battery_bank_usable_ah: float) -> float:
    """
    Deficit left after solar and the battery bank.

    Negative values are surplus capacity ("charge") and are kept signed.
    """
    return energy_deficit_ah - battery_bank_usable_ah


def calculate_batteries_needed(energy_deficit_ah: float, usable_ah_per_battery: float) -> int:
    """Batteries required to carry the daily deficit; at least one."""
    if energy_deficit_ah <= 0:
        return 1
    return max(1, int(math.ceil(energy_deficit_ah / usable_ah_per_battery)))


def calculate_required_solar_watts(
    daily_ah: float,
    peak_sun_hours: float,
    system_voltage: float = SYSTEM_VOLTAGE,
) -> int:
    """
    Array size that would cover the whole daily consumption, rounded up to
    the nearest 10 W.

    watts = (Ah x voltage) / peak sun hours
    """
    if daily_ah <= 0 or peak_sun_hours <= 0:
        return 0
    watts = (daily_ah * system_voltage) / peak_sun_hours
    return int(math.ceil(round_half_up(watts, 6) / 10.0)) * 10


def calculate_additional_panels(
    required_solar_watts: float,
    current_solar_watts: float,
    panel_watts: float,
) -> Tuple[int, int]:
    """
    Panels still needed to reach ``required_solar_watts``.

    Panels go on in pairs, so the count is rounded up to an even number.

    Returns:
        (additional_watts, panels)
    """
    if required_solar_watts <= 0 or current_solar_watts >= required_solar_watts:
        return 0, 0
    additional = int(math.ceil(required_solar_watts - current_solar_watts))
    panels = int(math.ceil(additional / panel_watts))
    panels = int(math.ceil(panels / 2.0)) * 2
    return additional, panels


def calculate_battery_bank_ah(battery_count: int, total_ah_per_battery: float) -> float:
    return battery_count * total_ah_per_battery


def calculate_usable_battery_bank_ah(battery_count: int, usable_ah_per_battery: float) -> float:
    return battery_count * usable_ah_per_battery


def calculate_charge_needed_to_full(energy_deficit_ah: float, battery_bank_usable_ah: float) -> float:
    """Amp-hours drawn out of the bank by the end of the day."""
    return min(max(0.0, energy_deficit_ah), battery_bank_usable_ah)


def calculate_dc_charging_hours(battery_bank_usable_ah: float, charger_amps: float) -> float:
    """Driving hours for the DC-DC charger to take the bank from empty to full."""
    if not charger_amps or charger_amps <= 0:
        return 0.0
    return battery_bank_usable_ah / charger_amps


def calculate_generator_hours(
    energy_deficit_ah: float,
    has_generator: bool,
    charger_amps: float = 120.0,
) -> float:
    """Daily generator runtime needed to replace the deficit left after solar."""
    if not has_generator or energy_deficit_ah <= 0:
        return 0.0
    return energy_deficit_ah / charger_amps


def average_load_amps(daily_ah: float) -> float:
    """DC current the loads keep drawing while the bank charges."""
    return daily_ah / HOURS_PER_DAY


def calculate_shore_charge_amps(
    ac_amps: float,
    load_amps: float,
    *,
    charger_max_amps: float = 120.0,
    charger_efficiency: float = 0.9,
    ac_voltage: float = 120.0,
    continuous_derate: float = 0.8,
    system_voltage: float = SYSTEM_VOLTAGE,
) -> float:
    """
    Net DC current into the bank from a shore connection.

    The breaker limits AC draw to ``ac_amps x continuous_derate``; the charger
    converts that at ``charger_efficiency`` up to its own ceiling, and the
    running loads take their share first.
    """
    ac_watts = ac_amps * ac_voltage * continuous_derate
    dc_amps = min(charger_max_amps, (ac_watts * charger_efficiency) / system_voltage)
    return max(0.0, dc_amps - load_amps)


def calculate_shore_power_hours(battery_bank_usable_ah: float, net_charge_amps: float) -> float:
    if net_charge_amps <= 0:
        return 0.0
    return battery_bank_usable_ah / net_charge_amps
