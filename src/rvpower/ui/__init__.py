"""
UI Module
=========

Streamlit-based sizing wizard:
- Select Appliances
- Usage Patterns
- Battery Configuration
- Solar & Charging
- Results
"""
