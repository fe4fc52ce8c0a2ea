from __future__ import annotations

import logging
from typing import List, Optional

from ..catalog.battery import BatterySpec, load_battery_spec
from ..catalog.charging import ChargingHardware, load_charging_hardware
from ..catalog.regions import get_peak_sun_hours, load_regions
from ..catalog.solar import SolarSpec, load_solar_spec
from . import calculations as calc
from .models import ShorePowerEstimate, SizingInputs, SizingResults
from .suggestions import get_min_solution_suggestion

logger = logging.getLogger(__name__)


def _shore_power(
    battery_bank_usable_ah: float,
    daily_ah: float,
    hardware: ChargingHardware,
    system_voltage: float,
) -> List[ShorePowerEstimate]:
    load_amps = calc.average_load_amps(daily_ah)
    estimates = []
    for source in hardware.shore_sources:
        net = calc.calculate_shore_charge_amps(
            source.amps,
            load_amps,
            charger_max_amps=hardware.shore_charger_max_amps,
            charger_efficiency=hardware.shore_charger_efficiency,
            ac_voltage=hardware.ac_voltage,
            continuous_derate=hardware.continuous_derate,
            system_voltage=system_voltage,
        )
        hours = calc.calculate_shore_power_hours(battery_bank_usable_ah, net)
        estimates.append(
            ShorePowerEstimate(
                source_id=source.id,
                label=source.label,
                ac_amps=source.amps,
                net_charge_amps=calc.round_half_up(net, 1),
                hours_to_full=calc.round_half_up(hours, 1) if hours > 0 else 0.0,
            )
        )
    return estimates


def calculate_battery_requirements(
    inputs: SizingInputs,
    *,
    battery: Optional[BatterySpec] = None,
    solar_spec: Optional[SolarSpec] = None,
    hardware: Optional[ChargingHardware] = None,
) -> SizingResults:
    """
    Full recalculation from the current wizard inputs:
    - load: running/starting watts and daily amp-hours
    - solar harvest for the chosen region/season
    - battery bank, remaining deficit and minimum fix
    - generator, alternator and shore-power charging times
    """
    battery = battery or load_battery_spec()
    solar_spec = solar_spec or load_solar_spec()
    hardware = hardware or load_charging_hardware()

    voltage = battery.voltage
    efficiency = float(inputs.battery.inverter_efficiency)
    items = inputs.appliances
    solar = inputs.solar
    charging = inputs.charging

    region = solar.region if solar.region in load_regions() else None
    psh = get_peak_sun_hours(solar.region, solar.season)

    running_watts = calc.calculate_running_watts(items)
    starting_watts = calc.calculate_starting_watts(items)
    daily_ah = calc.calculate_daily_amp_hours(items, voltage, efficiency)

    solar_ah = calc.calculate_solar_ah(solar.solar_watts, psh, voltage)
    deficit_after_solar = calc.calculate_energy_deficit(daily_ah, solar_ah)

    # Every deficit branch works from the displayed (1 dp) value
    deficit_display = calc.round_half_up(deficit_after_solar, 1)

    battery_count = int(inputs.battery.battery_count)
    batteries_needed = calc.calculate_batteries_needed(deficit_display, battery.usable_ah)
    bank_total = calc.calculate_battery_bank_ah(battery_count, battery.total_ah)
    bank_usable = calc.calculate_usable_battery_bank_ah(battery_count, battery.usable_ah)
    final_deficit = calc.round_half_up(calc.calculate_final_energy_deficit(deficit_display, bank_usable), 1)
    charge_to_full = calc.calculate_charge_needed_to_full(deficit_after_solar, bank_usable)

    required_solar = calc.calculate_required_solar_watts(daily_ah, psh, voltage)
    additional_watts, additional_panels = calc.calculate_additional_panels(
        required_solar, solar.solar_watts, solar_spec.panel_watts
    )

    generator_hours = calc.calculate_generator_hours(
        deficit_after_solar, charging.has_generator, hardware.generator_amps
    )
    drive_hours = calc.calculate_dc_charging_hours(bank_usable, charging.orion_amps)
    shore = _shore_power(bank_usable, daily_ah, hardware, voltage)

    min_solution = get_min_solution_suggestion(
        final_deficit,
        solar.solar_watts,
        battery_count,
        solar.region,
        solar.season,
        options=solar_spec.options,
        usable_ah_per_battery=battery.usable_ah,
        system_voltage=voltage,
    )

    logger.debug(
        "Recalculated: %d appliances, %.1f Ah/day, solar %.1f Ah, final deficit %.1f Ah",
        len(items), daily_ah, solar_ah, final_deficit,
    )

    # Warnings
    warnings: List[str] = []
    if not items:
        warnings.append("No appliances selected; all loads are zero.")
    if final_deficit > 0:
        warnings.append(
            f"Remaining energy deficit of {final_deficit:,.1f} Ah after solar "
            f"({calc.round_half_up(solar_ah, 1):,.1f} Ah) and batteries ({bank_usable:,.0f} Ah usable). "
            "This deficit must be covered by charging sources (generator, DC-DC, or shore power)."
        )
    if batteries_needed > battery_count:
        warnings.append(
            f"Battery bank of {battery_count} may be insufficient: {batteries_needed} "
            f"batteries needed to carry {deficit_display:,.1f} Ah per day."
        )
    if charging.has_generator and generator_hours > 24:
        warnings.append(
            f"Generator would need {calc.round_half_up(generator_hours, 1)} h per day; "
            "the generator alone cannot keep up."
        )
    for estimate in shore:
        if estimate.net_charge_amps <= 0 and daily_ah > 0:
            warnings.append(f"{estimate.label}: average load exceeds the available charge current.")

    # Caveats shown with the results
    notes: List[str] = [
        f"Battery specs: {battery.label} with {battery.usable_ah:.0f}Ah usable capacity "
        f"({battery.depth_of_discharge:.0%} depth of discharge).",
        f"Inverter efficiency: calculations account for {efficiency:.0%} inverter efficiency "
        "when converting DC battery power to AC for appliances.",
        f"Starting watts: your inverter must handle the peak starting wattage "
        f"({round(starting_watts):,} W) when appliances first turn on.",
        f"Charging times assume {hardware.shore_charger_label} inverter/charger "
        "and account for the average load during charging.",
    ]
    if solar.has_solar:
        region_label = load_regions()[region].label if region else solar.region
        notes.append(
            f"Solar: contribution based on {solar.solar_watts:.0f}W and {psh:.1f}h peak sun hours "
            f"({region_label}, {solar.season}). Actual production varies with weather, shading, "
            "and panel orientation."
        )
    if charging.has_generator:
        if generator_hours > 0:
            notes.append(
                f"Generator: run the {hardware.generator_label} for {calc.round_half_up(generator_hours, 1)} "
                "hours per day to make up the deficit. More batteries or solar reduce generator use."
            )
        else:
            notes.append("Generator: no runtime needed; solar and batteries meet your daily needs.")
    if charging.orion_amps > 0:
        notes.append(
            f"Alternator charging: drive time assumes continuous driving at {charging.orion_amps}A. "
            "Actual charging may be limited by alternator capacity and vehicle load."
        )

    return SizingResults(
        running_watts=int(calc.round_half_up(running_watts)),
        starting_watts=int(calc.round_half_up(starting_watts)),
        daily_amp_hours=calc.round_half_up(daily_ah, 1),
        appliance_loads=calc.appliance_breakdown(items, voltage, efficiency),
        solar_watts=float(solar.solar_watts),
        has_solar=solar.has_solar,
        region=solar.region,
        season=solar.season,
        peak_sun_hours=psh,
        solar_ah=calc.round_half_up(solar_ah, 1),
        required_solar_watts=required_solar,
        additional_solar_watts=additional_watts,
        additional_solar_panels=additional_panels,
        energy_deficit_ah=deficit_display,
        final_energy_deficit_ah=final_deficit,
        charge_amount_needed_to_100=calc.round_half_up(charge_to_full, 1),
        batteries_needed=batteries_needed,
        battery_count=battery_count,
        battery_bank_total_ah=bank_total,
        battery_bank_usable_ah=bank_usable,
        has_generator=charging.has_generator,
        generator_hours_per_day=calc.round_half_up(generator_hours, 1) if generator_hours > 0 else 0.0,
        orion_amps=int(charging.orion_amps),
        drive_hours_to_full=calc.round_half_up(drive_hours, 1) if drive_hours > 0 else 0.0,
        shore_power=shore,
        system_voltage=voltage,
        usable_ah_per_battery=battery.usable_ah,
        inverter_efficiency=efficiency,
        min_solution=min_solution,
        warnings=warnings,
        notes=notes,
    )
