"""
Catalog Module
==============

Reference data consumed by the calculation engine:
- Appliance catalog (running/starting watts, duty cycle defaults)
- Battery spec (Epoch 12V 460Ah)
- Solar panel options and legacy sun conditions
- Region/season peak sun hours
- Charging hardware (Orion XS, generator, shore power)
"""

from .appliances import Appliance, ApplianceCatalog, IDLE_DRAW_IDS, load_catalog
from .battery import BatterySpec, load_battery_spec
from .charging import ChargingHardware, ShoreSource, load_charging_hardware
from .regions import (
    Region,
    REGION_ORDER,
    SEASONS,
    DEFAULT_REGION,
    DEFAULT_SEASON,
    load_regions,
    get_peak_sun_hours,
)
from .solar import SolarSpec, load_solar_spec
