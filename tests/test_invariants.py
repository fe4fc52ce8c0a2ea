"""
Property-Based Tests

Uses hypothesis to check invariants of the sizing formulas:
1. Consumption and deficits are never negative
2. The recommended battery count carries the deficit
3. Required solar covers the whole day, in 10W steps
4. Panel recommendations come in pairs
5. Suggestions actually close the deficit they report
6. More solar never increases the deficit
"""

import math

from hypothesis import given, settings, strategies as st

from rvpower.catalog import REGION_ORDER, SEASONS, get_peak_sun_hours
from rvpower.sizing import calculations as calc
from rvpower.sizing.models import ApplianceUsage
from rvpower.sizing.suggestions import get_min_solution_suggestion

USABLE_AH = 414.0
SOLAR_OPTIONS = (220, 440, 660, 880, 1100, 1320)

watts_strategy = st.floats(min_value=0, max_value=5000, allow_nan=False, allow_infinity=False)
amp_hours_strategy = st.floats(min_value=0, max_value=10000, allow_nan=False, allow_infinity=False)
psh_strategy = st.floats(min_value=0.5, max_value=8.0, allow_nan=False, allow_infinity=False)

# ApplianceUsage's signature exposes the camelCase aliases
usage_strategy = st.builds(
    ApplianceUsage,
    applianceId=st.just("item"),
    runningWatts=watts_strategy,
    startingWatts=watts_strategy,
    quantity=st.integers(min_value=-5, max_value=10),
    hoursPerDay=st.floats(min_value=-10, max_value=40, allow_nan=False, allow_infinity=False),
    dutyCycle=st.floats(min_value=-1, max_value=2, allow_nan=False, allow_infinity=False),
)


@given(item=usage_strategy)
@settings(max_examples=100)
def test_invariant_usage_is_clamped(item):
    """Quantity is at least one; hours stay in 0-24 and duty cycle in 0-1."""
    assert item.quantity >= 1
    assert 0 <= item.hours_per_day <= 24
    assert 0 <= item.duty_cycle <= 1


@given(items=st.lists(usage_strategy, max_size=8))
@settings(max_examples=100)
def test_invariant_daily_amp_hours_additive(items):
    """Daily amp-hours are non-negative and equal the per-appliance sum."""
    total = calc.calculate_daily_amp_hours(items)
    breakdown = calc.appliance_breakdown(items)

    assert total >= 0
    assert math.isclose(total, math.fsum(calc.appliance_amp_hours(i) for i in items), rel_tol=1e-9, abs_tol=1e-9)
    assert len(breakdown) == len(items)
    assert calc.calculate_starting_watts(items) >= max([i.starting_watts for i in items], default=0)


@given(daily=amp_hours_strategy, solar=amp_hours_strategy, batteries=st.integers(min_value=1, max_value=10))
@settings(max_examples=200)
def test_invariant_deficits(daily, solar, batteries):
    """Deficit after solar is non-negative; final deficit subtracts the usable bank."""
    deficit = calc.calculate_energy_deficit(daily, solar)
    usable = calc.calculate_usable_battery_bank_ah(batteries, USABLE_AH)
    final = calc.calculate_final_energy_deficit(deficit, usable)

    assert deficit >= 0
    assert math.isclose(final, deficit - usable)
    assert 0 <= calc.calculate_charge_needed_to_full(deficit, usable) <= usable


@given(deficit=amp_hours_strategy)
@settings(max_examples=200)
def test_invariant_batteries_carry_deficit(deficit):
    """Recommended batteries cover the deficit, and one fewer would not."""
    needed = calc.calculate_batteries_needed(deficit, USABLE_AH)

    assert needed >= 1
    assert needed * USABLE_AH >= deficit
    if needed > 1:
        assert (needed - 1) * USABLE_AH < deficit


@given(daily=st.floats(min_value=0.01, max_value=5000), psh=psh_strategy)
@settings(max_examples=200)
def test_invariant_required_solar(daily, psh):
    """Required solar is a multiple of 10W that covers the day."""
    required = calc.calculate_required_solar_watts(daily, psh)

    assert required % 10 == 0
    assert required * psh / calc.SYSTEM_VOLTAGE >= daily * (1 - 1e-6)
    assert (required - 10) * psh / calc.SYSTEM_VOLTAGE < daily


@given(
    required=st.integers(min_value=0, max_value=10000),
    current=st.sampled_from((0,) + SOLAR_OPTIONS),
)
@settings(max_examples=200)
def test_invariant_panels_in_pairs(required, current):
    """Additional panels are an even count large enough for the missing watts."""
    additional, panels = calc.calculate_additional_panels(required, current, 110)

    assert panels % 2 == 0
    assert panels * 110 >= additional
    assert additional == max(0, required - current)


@given(
    deficit=st.floats(min_value=0.1, max_value=3000, allow_nan=False, allow_infinity=False),
    current=st.sampled_from((0,) + SOLAR_OPTIONS),
    batteries=st.integers(min_value=1, max_value=10),
    region=st.sampled_from(REGION_ORDER),
    season=st.sampled_from(SEASONS),
)
@settings(max_examples=200)
def test_invariant_min_solution_closes_deficit(deficit, current, batteries, region, season):
    """The suggested change removes at least the reported deficit."""
    suggestion = get_min_solution_suggestion(deficit, current, batteries, region, season)
    psh = get_peak_sun_hours(region, season)

    if suggestion.kind == "solar":
        assert suggestion.solar_watts > current
        assert (suggestion.solar_watts - current) * psh / calc.SYSTEM_VOLTAGE >= deficit
    else:
        assert suggestion.kind == "battery"
        assert suggestion.additional_batteries * USABLE_AH >= deficit
        assert all((w - current) * psh / calc.SYSTEM_VOLTAGE < deficit for w in SOLAR_OPTIONS if w > current)


@given(ac_amps=st.sampled_from((15, 20, 30, 50)), load=st.floats(min_value=0, max_value=500))
@settings(max_examples=100)
def test_invariant_shore_charge_bounded(ac_amps, load):
    """Net shore charge current is between zero and the charger ceiling."""
    amps = calc.calculate_shore_charge_amps(ac_amps, load)
    assert 0 <= amps <= 120


@given(
    daily=amp_hours_strategy,
    small=st.sampled_from((0,) + SOLAR_OPTIONS),
    large=st.sampled_from((0,) + SOLAR_OPTIONS),
    psh=psh_strategy,
)
@settings(max_examples=200)
def test_invariant_deficit_monotone_in_solar(daily, small, large, psh):
    """More solar never increases the deficit."""
    if small > large:
        small, large = large, small
    with_small = calc.calculate_energy_deficit(daily, calc.calculate_solar_ah(small, psh))
    with_large = calc.calculate_energy_deficit(daily, calc.calculate_solar_ah(large, psh))

    assert with_large <= with_small
