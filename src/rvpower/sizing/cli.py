from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List

from pydantic import ValidationError

from ..catalog.appliances import ApplianceCatalog, load_catalog
from ..catalog.regions import SEASONS, load_regions
from ..config import Settings
from ..logging_config import setup_logging
from ..storage import JsonFileBackend, MissingInputError, WizardStore
from .models import ApplianceUsage, SizingInputs
from .sizer import calculate_battery_requirements

logger = logging.getLogger(__name__)


def _prompt_float(prompt: str, *, min_v: float | None = None, max_v: float | None = None) -> float:
    while True:
        raw = input(prompt).strip()
        try:
            v = float(raw)
        except ValueError:
            print("Please enter a number.", file=sys.stderr)
            continue
        if min_v is not None and v < min_v:
            print(f"Must be >= {min_v}.", file=sys.stderr)
            continue
        if max_v is not None and v > max_v:
            print(f"Must be <= {max_v}.", file=sys.stderr)
            continue
        return v


def _prompt_appliances(catalog: ApplianceCatalog) -> List[Dict[str, Any]]:
    while True:
        raw = input("Appliance ids (comma separated, see --list-appliances): ").strip()
        ids = [s.strip() for s in raw.split(",") if s.strip()]
        unknown = [i for i in ids if i not in catalog]
        if unknown:
            print(f"Unknown appliance(s): {', '.join(unknown)}", file=sys.stderr)
            continue
        if ids:
            return [{"id": i} for i in ids]
        print("Select at least one appliance.", file=sys.stderr)


def load_inputs(path: str | None, *, interactive: bool, catalog: ApplianceCatalog) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    if path:
        p = Path(path)
        if not p.exists():
            raise FileNotFoundError(f"Input JSON not found: {path}")
        data = json.loads(p.read_text())
        if not isinstance(data, dict):
            raise ValueError(f"Input JSON must be an object, got {type(data).__name__}")

    if interactive:
        if not data.get("appliances"):
            data["appliances"] = _prompt_appliances(catalog)

        battery = _section(data, "battery")
        if "batteryCount" not in battery and "battery_count" not in battery:
            battery["batteryCount"] = int(_prompt_float("Number of batteries (1-10): ", min_v=1, max_v=10))
        data["battery"] = battery

        solar = _section(data, "solar")
        if "solarWatts" not in solar and "solar_watts" not in solar:
            solar["solarWatts"] = _prompt_float("Installed solar (W, 0 for none): ", min_v=0)
        data["solar"] = solar

    return data


def resolve_appliances(data: Dict[str, Any], catalog: ApplianceCatalog) -> Dict[str, Any]:
    """
    Expand appliance entries given by catalog id into full usage records.

    Entries may carry ``quantity``, ``hoursPerDay`` and ``dutyCycle``; missing
    fields take the appliance defaults.
    """
    appliances = data.get("appliances") or []
    if not isinstance(appliances, list):
        raise ValueError("\"appliances\" must be a list")
    resolved = []
    for entry in appliances:
        if isinstance(entry, dict) and "id" in entry and "runningWatts" not in entry:
            appliance = catalog[entry["id"]]
            usage = ApplianceUsage.from_appliance(
                appliance,
                quantity=entry.get("quantity", 1),
                hours_per_day=entry.get("hoursPerDay", entry.get("hours_per_day")),
                duty_cycle=entry.get("dutyCycle", entry.get("duty_cycle")),
            )
            resolved.append(usage.model_dump(by_alias=True))
        else:
            resolved.append(entry)
    out = dict(data)
    out["appliances"] = resolved
    return out


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"\"{name}\" must be an object")
    return dict(section)


def _apply_overrides(data: Dict[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    solar = _section(data, "solar")
    if args.solar_watts is not None:
        solar["solarWatts"] = args.solar_watts
    if args.region:
        solar["region"] = args.region
    if args.season:
        solar["season"] = args.season
    battery = _section(data, "battery")
    if args.batteries is not None:
        battery["batteryCount"] = args.batteries
    charging = _section(data, "charging")
    if args.orion_amps is not None:
        charging["orionAmps"] = args.orion_amps
    if args.generator is not None:
        charging["hasGenerator"] = args.generator
    out = dict(data)
    out.update({"solar": solar, "battery": battery, "charging": charging})
    return out


def _list_appliances(catalog: ApplianceCatalog) -> None:
    for appliance in catalog:
        print(
            f"{appliance.id:28s} {appliance.category:20s} "
            f"{appliance.running_watts:7.0f}W run {appliance.starting_watts:7.0f}W start  {appliance.label}"
        )


def _list_regions() -> None:
    for key, region in load_regions().items():
        hours = "  ".join(f"{s}={region.psh[s]:.1f}h" for s in SEASONS)
        print(f"{key:28s} {region.label:30s} {hours}")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="RV power system sizing: batteries, solar and charging sources."
    )
    parser.add_argument(
        "--input",
        "-i",
        help="Path to form-data JSON (appliances, solar, battery, charging).",
    )
    parser.add_argument(
        "--output",
        "-o",
        default="rv_sizing_output.json",
        help="Path to write the full results JSON.",
    )
    parser.add_argument(
        "--from-state",
        action="store_true",
        help="Use the saved wizard state instead of --input.",
    )
    parser.add_argument("--state-file", help="Wizard state file (default from RVPOWER_STATE_FILE).")
    parser.add_argument("--region", choices=sorted(load_regions()), help="Region for peak sun hours.")
    parser.add_argument("--season", choices=SEASONS, help="Season for peak sun hours.")
    parser.add_argument("--solar-watts", type=float, help="Installed solar array (W).")
    parser.add_argument("--batteries", type=int, help="Number of batteries installed (1-10).")
    parser.add_argument("--orion-amps", type=int, choices=[0, 30, 50, 70], help="Orion XS charge rate (A).")
    parser.add_argument(
        "--generator",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Whether a generator is available for charging (overrides the input file).",
    )
    parser.add_argument("--list-appliances", action="store_true", help="Print the appliance catalog and exit.")
    parser.add_argument("--list-regions", action="store_true", help="Print regions with peak sun hours and exit.")
    parser.add_argument(
        "--interactive",
        action="store_true",
        help="Prompt for missing inputs (appliances, batteries, solar).",
    )
    parser.add_argument("--log-level", help="Logging level (default from RVPOWER_LOG_LEVEL).")

    args = parser.parse_args(argv)

    settings = Settings.from_env()
    setup_logging(args.log_level or settings.log_level, settings.log_file)
    catalog = load_catalog()

    if args.list_appliances:
        _list_appliances(catalog)
        return 0
    if args.list_regions:
        _list_regions()
        return 0

    try:
        if args.from_state:
            store = WizardStore(JsonFileBackend(Path(args.state_file) if args.state_file else settings.state_file), catalog)
            raw = store.build_inputs(settings.default_region, settings.default_season).model_dump(by_alias=True)
        else:
            raw = resolve_appliances(load_inputs(args.input, interactive=args.interactive, catalog=catalog), catalog)
        raw = _apply_overrides(raw, args)
        if not raw.get("appliances"):
            raise MissingInputError(["selected appliances"])
        inputs = SizingInputs.model_validate(raw)
    except MissingInputError as e:
        print(f"Input error: {e}", file=sys.stderr)
        return 2
    except ValidationError as e:
        print("Input validation error:", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2
    except (FileNotFoundError, KeyError, ValueError) as e:
        print(f"Input error: {e}", file=sys.stderr)
        return 2

    out = calculate_battery_requirements(inputs)
    Path(args.output).write_text(out.model_dump_json(indent=2))
    logger.info("Wrote results to %s", args.output)

    # Minimal console summary
    print(f"Running: {out.running_watts:,} W, Starting: {out.starting_watts:,} W")
    print(f"Daily consumption: {out.daily_amp_hours:,.1f} Ah at {out.system_voltage:.0f}V")
    print(
        f"Solar: {out.solar_watts:.0f} W x {out.peak_sun_hours:.1f} h = {out.solar_ah:,.1f} Ah "
        f"({out.region}, {out.season})"
    )
    print(
        f"Batteries: {out.battery_count} installed, {out.batteries_needed} needed "
        f"({out.battery_bank_usable_ah:,.0f} Ah usable)"
    )
    label = "Deficit" if out.has_deficit else "Charge"
    print(f"{label}: {abs(out.final_energy_deficit_ah):,.1f} Ah after solar & batteries")
    if out.has_generator:
        print(f"Generator runtime: {out.generator_hours_per_day:.1f} h/day")
    if out.orion_amps and out.drive_hours_to_full:
        print(f"Drive time to 100%: {out.drive_hours_to_full:.1f} h @ {out.orion_amps}A")
    for shore in out.shore_power:
        if shore.hours_to_full > 0:
            print(f"{shore.label}: {shore.hours_to_full:.1f} h to full")
    if out.min_solution:
        print(f"\nSuggestion: {out.min_solution.message}")
    if out.warnings:
        print("\nWarnings:", file=sys.stderr)
        for w in out.warnings:
            print(f"- {w}", file=sys.stderr)

    return 1 if out.has_deficit else 0


if __name__ == "__main__":
    raise SystemExit(main())
