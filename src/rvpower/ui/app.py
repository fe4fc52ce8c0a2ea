"""
RV Power System Calculator - Streamlit UI
=========================================

Step-by-step wizard for sizing an RV off-grid electrical system.

Pages:
1. Select Appliances
2. Usage Patterns
3. Battery Configuration
4. Solar & Charging
5. Results
"""

import logging
from typing import Optional

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from rvpower.catalog import (
    REGION_ORDER,
    SEASONS,
    load_battery_spec,
    load_catalog,
    load_charging_hardware,
    load_regions,
    load_solar_spec,
    get_peak_sun_hours,
)
from rvpower.config import Settings
from rvpower.logging_config import attach_collector, setup_logging
from rvpower.sizing import (
    BatteryConfig,
    ChargingConfig,
    SizingResults,
    SolarConfig,
    calculate_battery_requirements,
    solar_option_suggestions,
)
from rvpower.storage import MissingInputError, WizardStore

logger = logging.getLogger("rvpower.ui")


# Page configuration
st.set_page_config(
    page_title="RV Power System Calculator",
    page_icon="🔋",
    layout="wide",
    initial_sidebar_state="expanded"
)

st.markdown("""
<style>
    .stMetric {
        background-color: #f0f2f6;
        padding: 10px;
        border-radius: 5px;
    }
    h1 {
        color: #1f77b4;
    }
</style>
""", unsafe_allow_html=True)


PAGES = [
    "1️⃣ Select Appliances",
    "2️⃣ Usage Patterns",
    "3️⃣ Battery Configuration",
    "4️⃣ Solar & Charging",
    "5️⃣ Results",
]


@st.cache_resource
def _init_logging():
    settings = Settings.from_env()
    setup_logging(settings.log_level, settings.log_file)
    return attach_collector()


def get_store() -> WizardStore:
    store = WizardStore(st.session_state, load_catalog())
    store.initialize_session()
    return store


def recalculate(store: WizardStore) -> Optional[SizingResults]:
    """Recalculate results from the stored inputs; None while a step is incomplete."""
    settings = Settings.from_env()
    try:
        inputs = store.build_inputs(settings.default_region, settings.default_season)
    except MissingInputError as e:
        logger.info("Results unavailable: %s", e)
        return None
    return calculate_battery_requirements(inputs)


def render_summary(store: WizardStore):
    """Compact running totals shown above each step."""
    results = recalculate(store)
    if results is None or not results.appliance_loads:
        return
    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Running Watts", f"{results.running_watts:,} W")
    with col2:
        st.metric("Starting Watts", f"{results.starting_watts:,} W")
    with col3:
        st.metric("Daily Consumption", f"{results.daily_amp_hours:,.1f} Ah")


def _appliance_row(store: WizardStore, appliance, selected_qty: dict, usage: dict):
    """Checkbox plus quantity/hours/duty-cycle inputs for one appliance."""
    is_selected = appliance.id in selected_qty
    checked = st.checkbox(
        f"{appliance.label} ({appliance.running_watts:.0f}W running, {appliance.starting_watts:.0f}W starting)",
        value=is_selected,
        key=f"sel_{appliance.id}",
    )
    if checked != is_selected:
        store.set_selection(appliance.id, checked)
        st.rerun()
    if not checked:
        return

    info = usage.get(appliance.id) or store.default_usage(appliance)
    cols = st.columns(3)
    if appliance.has_quantity:
        with cols[0]:
            qty = st.number_input(
                "Quantity", min_value=1, value=int(selected_qty[appliance.id]), step=1,
                key=f"qty_{appliance.id}",
            )
            if qty != selected_qty[appliance.id]:
                store.set_quantity(appliance.id, qty)
    with cols[1]:
        hours = st.number_input(
            "Hours per day", min_value=0.0, max_value=24.0,
            value=float(info.get("hoursPerDay", appliance.default_hours)), step=0.1,
            key=f"hrs_{appliance.id}",
        )
        if hours != info.get("hoursPerDay"):
            store.set_hours(appliance.id, hours)
    if appliance.needs_duty_cycle:
        with cols[2]:
            duty = st.slider(
                "Duty cycle", min_value=0.0, max_value=1.0,
                value=float(info.get("dutyCycle", appliance.default_duty)), step=0.01,
                key=f"duty_{appliance.id}", help=appliance.duty_cycle_hint,
            )
            if duty != info.get("dutyCycle"):
                store.set_duty_cycle(appliance.id, duty)


def page_select_appliances(store: WizardStore):
    """Select Appliances page."""
    st.header("🔌 Select Appliances & Usage")
    st.caption("Select appliances and specify how long you'll use each per day")

    render_summary(store)

    catalog = store.catalog
    selected_qty = {a.id: q for a, q in store.load_selected_appliances()}
    usage = store.load_usage()

    with st.expander("Idle Draw", expanded=False):
        st.caption("These items run 24 hours per day. You can modify their settings below.")
        for appliance in catalog.idle_draw:
            _appliance_row(store, appliance, selected_qty, usage)

    for category, appliances in catalog.by_category().items():
        with st.expander(category, expanded=True):
            for appliance in appliances:
                _appliance_row(store, appliance, selected_qty, usage)


def page_usage(store: WizardStore):
    """Usage Patterns page."""
    st.header("⏱️ Usage Duration and Patterns")

    selected = store.load_selected_appliances()
    if not selected:
        st.info("Please select appliances first.")
        return

    usage = store.load_usage()
    rows = []
    for appliance, quantity in selected:
        info = usage.get(appliance.id) or store.default_usage(appliance)
        rows.append({
            "id": appliance.id,
            "Appliance": appliance.label + (f" ({quantity}x)" if quantity > 1 else ""),
            "Hours per day": float(info.get("hoursPerDay", appliance.default_hours)),
            "Duty cycle": float(info.get("dutyCycle", appliance.default_duty)),
        })
    df = pd.DataFrame(rows).set_index("id")

    edited = st.data_editor(
        df,
        column_config={
            "Appliance": st.column_config.TextColumn(disabled=True),
            "Hours per day": st.column_config.NumberColumn(min_value=0.0, max_value=24.0, step=0.1),
            "Duty cycle": st.column_config.NumberColumn(min_value=0.0, max_value=1.0, step=0.01, format="%.2f"),
        },
        use_container_width=True,
        key="usage_editor",
    )

    changed = edited[(edited["Hours per day"] != df["Hours per day"]) | (edited["Duty cycle"] != df["Duty cycle"])]
    for appliance_id, row in changed.iterrows():
        store.set_hours(appliance_id, row["Hours per day"])
        store.set_duty_cycle(appliance_id, row["Duty cycle"])
    if not changed.empty:
        st.rerun()

    render_summary(store)


def page_battery(store: WizardStore):
    """Battery Configuration page."""
    st.header("🔋 Battery System Configuration")

    spec = load_battery_spec()
    config = store.load_battery_config()

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Battery Type", spec.label)
    with col2:
        st.metric("Voltage", f"{spec.voltage:.0f}V (fixed)")
    with col3:
        st.metric("Per Battery", f"{spec.total_ah:.0f}Ah / {spec.usable_ah:.0f}Ah usable")

    count = st.number_input("Number of batteries", min_value=1, max_value=10, value=config.battery_count, step=1)
    efficiency = st.slider(
        "Inverter efficiency", min_value=0.7, max_value=1.0, value=float(config.inverter_efficiency), step=0.01,
        help="Default: 90%",
    )
    new_config = BatteryConfig(battery_count=int(count), inverter_efficiency=efficiency)
    if new_config != config:
        store.save_battery_config(new_config)

    col1, col2 = st.columns(2)
    with col1:
        st.metric("Total Battery Bank Capacity", f"{new_config.battery_count * spec.total_ah:,.0f} Ah")
    with col2:
        st.metric("Usable Battery Bank Capacity", f"{new_config.battery_count * spec.usable_ah:,.0f} Ah")


def page_solar_charging(store: WizardStore):
    """Solar & Charging page."""
    st.header("☀️ Solar & Charging")

    regions = load_regions()
    solar_spec = load_solar_spec()
    hardware = load_charging_hardware()
    settings = Settings.from_env()
    solar = store.load_solar_config(settings.default_region, settings.default_season)

    results = recalculate(store)
    final_deficit = results.final_energy_deficit_ah if results else 0.0

    st.subheader("Solar Panels")
    st.caption(f"Each increment is 2 panels x {solar_spec.panel_watts:.0f}W")
    hints = solar_option_suggestions(final_deficit, solar.solar_watts, solar.region, solar.season,
                                     options=solar_spec.options)
    choices = solar_spec.choices(solar.solar_watts)
    watts = st.radio(
        "Solar array", choices, index=choices.index(solar.solar_watts), horizontal=True,
        format_func=lambda w: f"{w:.0f}W" if w else "None",
    )
    for option, hint in hints.items():
        if hint.kind == "solves":
            st.success(f"{option}W: {hint.message}")
        else:
            st.caption(f"{option}W: {hint.message}")

    region_keys = [k for k in REGION_ORDER if k in regions]
    region = st.selectbox(
        "Region", region_keys, index=region_keys.index(solar.region) if solar.region in region_keys else 0,
        format_func=lambda k: regions[k].label,
    )
    season = st.radio(
        "Season", SEASONS, index=SEASONS.index(solar.season) if solar.season in SEASONS else len(SEASONS) - 1,
        horizontal=True,
        format_func=lambda s: f"{s.capitalize()} ({get_peak_sun_hours(region, s):.1f} h/day)",
    )

    new_solar = SolarConfig(solar_watts=watts, region=region, season=season)
    if new_solar != solar:
        store.save_solar_config(new_solar)

    if watts > 0:
        psh = get_peak_sun_hours(region, season)
        st.metric(
            "Estimated Daily Solar Contribution", f"{watts * psh / 12:.0f} Ah",
            help=f"{watts}W x {psh:.1f}h / 12V",
        )

    st.divider()

    st.subheader("Charging Sources")
    charging = store.load_charging_config()
    orion = st.selectbox(
        "Orion XS DC-DC charger", hardware.orion_options,
        index=hardware.orion_options.index(charging.orion_amps),
        format_func=lambda a: "None / Not installed" if a == 0 else f"{a}A",
    )
    has_generator = st.checkbox(
        f"I have a {hardware.generator_label} generator", value=charging.has_generator,
        help=f"Generator provides up to {hardware.generator_amps:.0f}A DC charging",
    )
    new_charging = ChargingConfig(orion_amps=orion, has_generator=has_generator)
    if new_charging != charging:
        store.save_charging_config(new_charging)


def _loads_chart(results: SizingResults):
    df = pd.DataFrame([load.model_dump() for load in results.appliance_loads])
    if df.empty:
        return
    df = df.sort_values("daily_ah", ascending=True)
    fig = go.Figure(data=[
        go.Bar(
            x=df["daily_ah"],
            y=df["label"],
            orientation='h',
            marker_color='#1f77b4'
        )
    ])
    fig.update_layout(
        xaxis_title="Daily Amp-Hours (Ah)",
        height=max(250, 28 * len(df)),
        margin=dict(l=10, r=10, t=10, b=10)
    )
    st.plotly_chart(fig, use_container_width=True)


def page_results(store: WizardStore):
    """Results page."""
    st.header("📊 Power System Recommendations")

    settings = Settings.from_env()
    try:
        inputs = store.build_inputs(settings.default_region, settings.default_season)
    except MissingInputError:
        st.error(MissingInputError.USER_MESSAGE)
        if st.button("Start Over", type="primary"):
            store.reset()
            st.rerun()
        return

    results = calculate_battery_requirements(inputs)

    st.subheader("Your Power Requirements")
    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Total Running Watts", f"{results.running_watts:,} W")
    with col2:
        st.metric("Total Starting Watts", f"{results.starting_watts:,} W", help="Peak surge requirement")
    with col3:
        st.metric("Daily Amp-Hour Consumption", f"{results.daily_amp_hours:,.1f} Ah",
                  help=f"At {results.system_voltage:.0f}V system")

    _loads_chart(results)

    st.divider()

    st.subheader("Solar & Charging Impact")
    col1, col2, col3 = st.columns(3)
    with col1:
        label = "Deficit" if results.has_deficit else "Charge"
        st.metric(label, f"{abs(results.final_energy_deficit_ah):,.1f} Ah",
                  help="After solar & batteries - used for all charging calculations")
        if results.min_solution:
            st.caption(results.min_solution.message)
    with col2:
        if results.has_generator:
            st.metric("Generator Runtime", f"{results.generator_hours_per_day:,.1f} h")
            if results.charge_amount_needed_to_100 > 0:
                st.caption(f"Charge {results.charge_amount_needed_to_100:,.1f} Ah to 100%")
    with col3:
        if results.orion_amps > 0 and results.drive_hours_to_full > 0:
            st.metric("Drive Time to 100%", f"{results.drive_hours_to_full:,.1f} h",
                      help=f"Orion XS @ {results.orion_amps}A")

    shore = [s for s in results.shore_power if s.hours_to_full > 0]
    if shore:
        st.markdown("**Shore Power Charging** (empty to full)")
        cols = st.columns(len(shore))
        for col, estimate in zip(cols, shore):
            with col:
                st.metric(estimate.label, f"{estimate.hours_to_full:,.1f} h")

    st.divider()

    st.subheader("Battery Bank Details")
    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Batteries Needed", f"{results.batteries_needed}", help=f"{results.battery_count} installed")
    with col2:
        st.metric("Total Battery Bank Capacity", f"{results.battery_bank_total_ah:,.0f} Ah")
    with col3:
        st.metric("Usable Battery Bank Capacity", f"{results.battery_bank_usable_ah:,.0f} Ah",
                  help=f"{results.usable_ah_per_battery:.0f}Ah per battery")

    if results.has_deficit:
        st.warning(results.warnings[0] if results.warnings else "Energy deficit remains.")
    else:
        st.success(
            f"✓ Your solar ({results.solar_ah:,.1f} Ah) and battery capacity "
            f"({results.battery_bank_usable_ah:,.0f} Ah usable) fully meet your daily energy needs "
            f"({results.daily_amp_hours:,.1f} Ah)."
        )

    if results.additional_solar_panels > 0:
        st.subheader("Solar Recommendations")
        st.metric(
            "Additional Solar Needed", f"{results.additional_solar_panels} panels",
            help=f"{results.additional_solar_watts}W needed ({results.additional_solar_panels // 2} pairs)",
        )

    with st.expander("Important Notes", expanded=False):
        for note in results.notes:
            st.markdown(f"- {note}")
        for warning in results.warnings[1 if results.has_deficit else 0:]:
            st.markdown(f"- ⚠️ {warning}")


def render_debug_panel(collector):
    with st.expander("🐞 Debug Logs", expanded=False):
        st.text(collector.as_text()[-5000:] or "No logs yet.")
        st.download_button(
            "Download Logs",
            data=collector.as_text(),
            file_name="rv-calculator-logs.txt",
            mime="text/plain",
        )
        if st.button("Clear Logs"):
            collector.clear()


def main():
    """Main application."""
    collector = _init_logging()
    st.title("🚐 RV Power System Calculator")
    st.caption("Size your batteries, solar and charging sources")

    store = get_store()

    with st.sidebar:
        st.header("Navigation")
        page = st.radio("Step", PAGES)

        st.divider()
        if st.button("Reset Calculator", use_container_width=True):
            store.reset()
            for key in [k for k in st.session_state.keys() if str(k).startswith(("sel_", "qty_", "hrs_", "duty_", "usage_editor"))]:
                del st.session_state[key]
            st.rerun()

        render_debug_panel(collector)

    if "Select Appliances" in page:
        page_select_appliances(store)
    elif "Usage" in page:
        page_usage(store)
    elif "Battery" in page:
        page_battery(store)
    elif "Solar" in page:
        page_solar_charging(store)
    elif "Results" in page:
        page_results(store)


if __name__ == "__main__":
    main()
