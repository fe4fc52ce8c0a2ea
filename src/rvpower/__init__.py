"""
RV Power System Calculator
==========================

Sizing tool for RV off-grid electrical systems:
- Appliance load (running/starting watts, daily amp-hours)
- Battery bank (Epoch 12V 460Ah LiFePO4)
- Solar contribution by region and season
- Charging sources (DC-DC alternator, generator, shore power)

Architecture:
- catalog/: Reference data (appliances, battery, regions, charging hardware)
- sizing/: Calculation engine, suggestions, CLI
- storage: Wizard state persistence
- ui/: Streamlit wizard
"""

__version__ = "1.0.0"
