"""
Unit Tests for the Calculation Engine

Tests load totals, solar harvest, deficits, battery counts, solar sizing
and charging times against hand-computed values.
"""

import pytest

from rvpower.sizing import calculations as calc
from rvpower.sizing.models import ApplianceUsage


def usage(appliance_id, running, starting=None, quantity=1, hours=1.0, duty=1.0):
    return ApplianceUsage(
        appliance_id=appliance_id,
        label=appliance_id,
        running_watts=running,
        starting_watts=running if starting is None else starting,
        quantity=quantity,
        hours_per_day=hours,
        duty_cycle=duty,
    )


@pytest.fixture
def microwave():
    return usage("microwave", 1000, hours=1.0)


@pytest.fixture
def fridge():
    return usage("vitrifrigo_dp150i", 60, starting=120, hours=24, duty=0.4)


class TestRounding:
    """Test half-up rounding used for every displayed value."""

    def test_halves_round_up(self):
        assert calc.round_half_up(2.5) == 3.0
        assert calc.round_half_up(3.5) == 4.0

    def test_decimal_places(self):
        assert calc.round_half_up(0.125, 2) == 0.13
        assert calc.round_half_up(92.5926, 1) == 92.6

    def test_negative_halves_round_toward_positive(self):
        assert calc.round_half_up(-2.5) == -2.0
        assert calc.round_half_up(-321.407, 1) == -321.4


class TestLoadTotals:
    """Test running, starting and daily amp-hour totals."""

    def test_running_watts_weighted_by_duty_cycle(self, microwave, fridge):
        assert calc.calculate_running_watts([microwave, fridge]) == pytest.approx(1024.0)

    def test_running_watts_multiplies_quantity(self):
        laptops = usage("laptop", 65, quantity=3)
        assert calc.calculate_running_watts([laptops]) == pytest.approx(195.0)

    def test_starting_watts_is_largest_single_surge(self, microwave, fridge):
        assert calc.calculate_starting_watts([microwave, fridge]) == 1000

    def test_starting_watts_empty(self):
        assert calc.calculate_starting_watts([]) == 0

    def test_appliance_amp_hours(self, microwave, fridge):
        # 1000W x 1h / (12V x 0.9)
        assert calc.appliance_amp_hours(microwave) == pytest.approx(92.5926, rel=1e-4)
        # 60W x 0.4 x 24h / 10.8
        assert calc.appliance_amp_hours(fridge) == pytest.approx(53.3333, rel=1e-4)

    def test_daily_amp_hours_sums_appliances(self, microwave, fridge):
        assert calc.calculate_daily_amp_hours([microwave, fridge]) == pytest.approx(145.9259, rel=1e-4)

    def test_inverter_efficiency_scales_consumption(self, microwave):
        assert calc.calculate_daily_amp_hours([microwave], 12.0, 1.0) == pytest.approx(1000 / 12)

    def test_zero_duty_cycle_contributes_nothing(self):
        idle = usage("rooftop_ac_13500", 1300, hours=8, duty=0.0)
        assert calc.calculate_daily_amp_hours([idle]) == 0

    def test_breakdown_shares_sum_to_one(self, microwave, fridge):
        loads = calc.appliance_breakdown([microwave, fridge])

        assert [load.appliance_id for load in loads] == ["microwave", "vitrifrigo_dp150i"]
        assert loads[0].daily_ah == 92.6
        assert loads[1].daily_ah == 53.3
        assert sum(load.share for load in loads) == pytest.approx(1.0)

    def test_breakdown_without_load(self):
        loads = calc.appliance_breakdown([usage("tv_32", 40, hours=0)])
        assert loads[0].share == 0.0


class TestSolar:
    """Test solar harvest and array sizing."""

    def test_solar_ah(self):
        # 440W x 6.1h / 12V
        assert calc.calculate_solar_ah(440, 6.1) == pytest.approx(223.6667, rel=1e-4)

    def test_no_solar(self):
        assert calc.calculate_solar_ah(0, 6.1) == 0.0

    def test_required_solar_exact_multiple(self):
        # 100Ah x 12V / 5h = 240W
        assert calc.calculate_required_solar_watts(100, 5.0) == 240

    def test_required_solar_rounds_up_to_ten(self):
        # 101Ah x 12V / 5h = 242.4W
        assert calc.calculate_required_solar_watts(101, 5.0) == 250

    def test_required_solar_without_load_or_sun(self):
        assert calc.calculate_required_solar_watts(0, 5.0) == 0
        assert calc.calculate_required_solar_watts(100, 0) == 0

    def test_additional_panels_rounded_to_pairs(self):
        assert calc.calculate_additional_panels(250, 0, 110) == (250, 4)
        assert calc.calculate_additional_panels(240, 220, 110) == (20, 2)

    def test_no_additional_panels_when_covered(self):
        assert calc.calculate_additional_panels(220, 440, 110) == (0, 0)
        assert calc.calculate_additional_panels(0, 0, 110) == (0, 0)


class TestDeficitAndBatteries:
    """Test deficits and battery bank sizing."""

    def test_energy_deficit_never_negative(self):
        assert calc.calculate_energy_deficit(100, 150) == 0.0
        assert calc.calculate_energy_deficit(150, 100) == 50.0

    def test_final_deficit_is_signed(self):
        assert calc.calculate_final_energy_deficit(50, 414) == -364
        assert calc.calculate_final_energy_deficit(500, 414) == 86

    def test_batteries_needed(self):
        assert calc.calculate_batteries_needed(0, 414) == 1
        assert calc.calculate_batteries_needed(500, 414) == 2
        assert calc.calculate_batteries_needed(828, 414) == 2
        assert calc.calculate_batteries_needed(829, 414) == 3

    @pytest.mark.parametrize("deficit", [5e-324, 1e-9, 0.05])
    def test_tiny_deficit_still_needs_one_battery(self, deficit):
        assert calc.calculate_batteries_needed(deficit, 414) == 1

    def test_bank_capacity(self):
        assert calc.calculate_battery_bank_ah(3, 460) == 1380
        assert calc.calculate_usable_battery_bank_ah(3, 414) == 1242

    def test_charge_needed_capped_by_bank(self):
        assert calc.calculate_charge_needed_to_full(50, 414) == 50
        assert calc.calculate_charge_needed_to_full(500, 414) == 414
        assert calc.calculate_charge_needed_to_full(-10, 414) == 0


class TestChargingTimes:
    """Test generator, alternator and shore-power charging times."""

    def test_generator_hours(self):
        assert calc.calculate_generator_hours(240, True) == 2.0

    def test_no_generator(self):
        assert calc.calculate_generator_hours(240, False) == 0.0
        assert calc.calculate_generator_hours(0, True) == 0.0

    def test_dc_charging_hours(self):
        assert calc.calculate_dc_charging_hours(414, 50) == pytest.approx(8.28)
        assert calc.calculate_dc_charging_hours(414, 0) == 0.0

    def test_shore_charge_limited_by_breaker(self):
        # 15A x 120V x 0.8 x 0.9 / 12V = 108A, minus 24A of load
        assert calc.calculate_shore_charge_amps(15, 24) == pytest.approx(84.0)

    def test_shore_charge_limited_by_charger(self):
        assert calc.calculate_shore_charge_amps(30, 0) == pytest.approx(120.0)
        assert calc.calculate_shore_charge_amps(50, 20) == pytest.approx(100.0)

    def test_shore_charge_never_negative(self):
        assert calc.calculate_shore_charge_amps(20, 200) == 0.0

    def test_shore_power_hours(self):
        assert calc.calculate_shore_power_hours(414, 84) == pytest.approx(4.9286, rel=1e-4)
        assert calc.calculate_shore_power_hours(414, 0) == 0.0

    def test_average_load_amps(self):
        assert calc.average_load_amps(240) == 10.0

    def test_watts_to_amps(self):
        assert calc.watts_to_amps(120) == 10.0
        assert calc.watts_to_amps(120, 24.0) == 5.0
