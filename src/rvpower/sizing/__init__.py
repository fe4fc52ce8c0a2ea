"""
Sizing toolchain.

Converts selected appliances and their daily usage into amp-hour demand, then
derives battery bank, solar and charging-source sizing for a 12V RV system.
"""

from .models import (
    ApplianceUsage,
    BatteryConfig,
    ChargingConfig,
    SizingInputs,
    SizingResults,
    SolarConfig,
    Suggestion,
)
from .sizer import calculate_battery_requirements
from .suggestions import (
    get_deficit_after_adding_solar,
    get_min_solution_suggestion,
    solar_option_suggestions,
)
