"""
Unit Tests for the Reference Catalog

Tests the packaged appliance, battery, solar, region and charging data.
"""

import pytest

from rvpower.catalog import (
    Appliance,
    ApplianceCatalog,
    IDLE_DRAW_IDS,
    REGION_ORDER,
    get_peak_sun_hours,
    load_battery_spec,
    load_catalog,
    load_charging_hardware,
    load_regions,
    load_solar_spec,
)
from rvpower.catalog.battery import BatterySpec
from rvpower.catalog.regions import Region


class TestApplianceCatalog:
    """Test the appliance catalog and its defaults."""

    @pytest.fixture
    def catalog(self):
        return load_catalog()

    def test_idle_draw_items_in_order(self, catalog):
        assert [a.id for a in catalog.idle_draw] == list(IDLE_DRAW_IDS)
        assert all(a.default_hours == 24 for a in catalog.idle_draw)

    def test_categories_exclude_idle_draw(self, catalog):
        groups = catalog.by_category()

        assert "Idle Draw" not in groups
        assert list(groups) == ["Kitchen", "Climate", "Electronics", "Bathroom & Utility"]
        assert sum(len(items) for items in groups.values()) == len(catalog) - len(IDLE_DRAW_IDS)

    def test_default_hours(self, catalog):
        assert catalog["rooftop_ac_13500"].default_hours == 8
        assert catalog["portable_refrigerator"].default_hours == 24
        assert catalog["microwave"].default_hours == 1

    def test_default_duty(self, catalog):
        assert catalog["vitrifrigo_dp150i"].default_duty == 0.4
        assert catalog["microwave"].default_duty == 1.0

    def test_duty_cycle_hint(self, catalog):
        assert catalog["portable_refrigerator"].duty_cycle_hint.startswith("Refrigerators")
        assert catalog["rooftop_ac_13500"].duty_cycle_hint == "Furnaces and AC units cycle on/off. Default: 60%"

    def test_unknown_appliance(self, catalog):
        assert "hot_tub" not in catalog
        assert catalog.get("hot_tub") is None
        with pytest.raises(KeyError, match="Unknown appliance"):
            catalog["hot_tub"]

    def test_dict_round_trip_keeps_camel_case(self, catalog):
        data = catalog["portable_refrigerator"].to_dict()

        assert data["runningWatts"] == 45
        assert data["hasQuantity"] is True
        assert Appliance.from_dict(data) == catalog["portable_refrigerator"]

    def test_duplicate_ids_rejected(self):
        fan = Appliance("fan", "Fan", "Climate", 30, 30)
        with pytest.raises(ValueError, match="Duplicate"):
            ApplianceCatalog([fan, fan])

    def test_invalid_appliance(self):
        with pytest.raises(ValueError):
            Appliance("bad", "Bad", "Other", -1, 0)
        with pytest.raises(ValueError):
            Appliance("bad", "Bad", "Other", 10, 10, default_duty_cycle=1.5)


class TestBatterySpec:
    """Test the Epoch battery spec."""

    def test_packaged_spec(self):
        spec = load_battery_spec()

        assert spec.voltage == 12
        assert spec.total_ah == 460
        assert spec.usable_ah == 414
        assert spec.depth_of_discharge == pytest.approx(0.9)
        assert spec.usable_wh == 4968

    def test_usable_cannot_exceed_total(self):
        with pytest.raises(ValueError):
            BatterySpec("x", 12, 100, 120)


class TestSolarSpec:
    """Test solar panel options."""

    def test_options(self):
        spec = load_solar_spec()

        assert spec.panel_watts == 110
        assert spec.options == (220, 440, 660, 880, 1100, 1320)
        assert spec.max_watts == 1320

    def test_legacy_sun_hours(self):
        spec = load_solar_spec()

        assert spec.legacy_sun_hours("overcast") == 2.0
        assert spec.legacy_sun_hours("foggy") == 5.0

    def test_choices_include_none_and_every_option(self):
        assert load_solar_spec().choices() == (0, 220, 440, 660, 880, 1100, 1320)

    def test_choices_keep_saved_size_outside_options(self):
        choices = load_solar_spec().choices(330.0)

        assert 330.0 in choices
        assert choices.index(330.0) == 2
        assert load_solar_spec().choices(2200)[-1] == 2200

    def test_choices_do_not_duplicate_an_option(self):
        assert load_solar_spec().choices(440.0).count(440) == 1


class TestRegions:
    """Test region/season peak sun hours."""

    def test_all_regions_in_display_order(self):
        assert tuple(load_regions()) == REGION_ORDER

    def test_peak_sun_hours(self):
        assert get_peak_sun_hours("desert_southwest", "summer") == 7.2
        assert get_peak_sun_hours("pacific_northwest", "winter") == 1.4

    def test_fallbacks(self):
        assert get_peak_sun_hours("atlantis", "summer") == 7.2
        assert get_peak_sun_hours("pacific_northwest", "monsoon") == 3.5
        assert get_peak_sun_hours(None, None) == 6.1

    def test_region_requires_every_season(self):
        with pytest.raises(ValueError, match="missing peak sun hours"):
            Region("x", "X", {"summer": 5.0})


class TestChargingHardware:
    """Test charging hardware parameters."""

    def test_packaged_hardware(self):
        hardware = load_charging_hardware()

        assert hardware.orion_options == (0, 30, 50, 70)
        assert hardware.generator_amps == 120
        assert hardware.shore_charger_max_amps == 120
        assert [s.amps for s in hardware.shore_sources] == [15, 20, 30, 50]
