"""
Wizard State Storage
====================

Persists the wizard's selections between steps as JSON strings in a simple
key/value mapping: Streamlit's session state in the UI, a JSON file for the
CLI, or a plain dict in tests.

Malformed stored values are logged and replaced by defaults. Asking for
results before appliances and usage exist raises ``MissingInputError``.
"""

from __future__ import annotations

import json
import logging
import math
import os
from collections.abc import MutableMapping
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

from pydantic import BaseModel, ValidationError

from .catalog.appliances import Appliance, ApplianceCatalog, load_catalog
from .catalog.solar import load_solar_spec
from .sizing.models import (
    ApplianceUsage,
    BatteryConfig,
    ChargingConfig,
    SizingInputs,
    SolarConfig,
)

logger = logging.getLogger(__name__)


KEY_PREFIX = "rvCalculator_"
SELECTED_APPLIANCES_KEY = KEY_PREFIX + "selectedAppliances"
USAGE_DATA_KEY = KEY_PREFIX + "usageData"
BATTERY_CONFIG_KEY = KEY_PREFIX + "batteryConfig"
SOLAR_CONFIG_KEY = KEY_PREFIX + "solarConfig"
CHARGING_CONFIG_KEY = KEY_PREFIX + "chargingConfig"
SOLAR_PANELS_KEY = KEY_PREFIX + "solarPanels"

ALL_KEYS = (
    SELECTED_APPLIANCES_KEY,
    USAGE_DATA_KEY,
    BATTERY_CONFIG_KEY,
    SOLAR_CONFIG_KEY,
    CHARGING_CONFIG_KEY,
    SOLAR_PANELS_KEY,
)


class MissingInputError(Exception):
    """Results were requested before an earlier wizard step was completed."""

    USER_MESSAGE = "Missing form data. Please complete all steps."

    def __init__(self, missing: List[str]):
        self.missing = missing
        super().__init__(f"{self.USER_MESSAGE} (missing: {', '.join(missing)})")


class JsonFileBackend(MutableMapping):
    """Key/value store kept in a single JSON file, written on every change."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._data: Dict[str, str] = {}
        if self.path.exists():
            try:
                loaded = json.loads(self.path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as e:
                logger.warning("Ignoring unreadable state file %s: %s", self.path, e)
                loaded = {}
            if isinstance(loaded, dict):
                self._data = {str(k): v for k, v in loaded.items() if isinstance(v, str)}
            else:
                logger.warning("Ignoring state file %s: not a JSON object", self.path)

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Readers only ever see a complete file
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(json.dumps(self._data, indent=2), encoding="utf-8")
        os.replace(tmp, self.path)

    def __getitem__(self, key: str) -> str:
        return self._data[key]

    def __setitem__(self, key: str, value: str) -> None:
        self._data[key] = value
        self._flush()

    def __delitem__(self, key: str) -> None:
        del self._data[key]
        self._flush()

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)


class WizardStore:
    """
    Typed access to the wizard's persisted state.

    Args:
        backend: Mapping holding JSON strings (session state, dict, JsonFileBackend)
        catalog: Appliance catalog used to resolve stored appliance ids
    """

    def __init__(self, backend: MutableMapping, catalog: Optional[ApplianceCatalog] = None):
        self.backend = backend
        self.catalog = catalog or load_catalog()

    # --- raw JSON access ---

    def _read(self, key: str, default: Any = None) -> Any:
        raw = self.backend.get(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except (TypeError, json.JSONDecodeError) as e:
            logger.warning("Ignoring malformed %s: %s", key, e)
            return default

    def _write(self, key: str, value: Any) -> None:
        if isinstance(value, BaseModel):
            value = value.model_dump(by_alias=True)
        self.backend[key] = json.dumps(value)
        logger.debug("Saved %s", key)

    def has(self, key: str) -> bool:
        return self.backend.get(key) is not None

    # --- selected appliances ---

    def load_selected_appliances(self) -> List[Tuple[Appliance, int]]:
        """Selected appliances with quantities, in selection order."""
        raw = self._read(SELECTED_APPLIANCES_KEY, [])
        if not isinstance(raw, list):
            logger.warning("Ignoring malformed %s: expected a list", SELECTED_APPLIANCES_KEY)
            return []
        selected = []
        for entry in raw:
            try:
                appliance_data = entry["appliance"]
                appliance = self.catalog.get(appliance_data["id"]) or Appliance.from_dict(appliance_data)
                quantity = max(1, int(entry.get("quantity") or 1))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed selected appliance %r: %s", entry, e)
                continue
            selected.append((appliance, quantity))
        return selected

    def save_selected_appliances(self, selected: List[Tuple[Appliance, int]]) -> None:
        self._write(
            SELECTED_APPLIANCES_KEY,
            [{"appliance": appliance.to_dict(), "quantity": int(quantity)} for appliance, quantity in selected],
        )

    def selected_ids(self) -> List[str]:
        return [appliance.id for appliance, _ in self.load_selected_appliances()]

    # --- usage ---

    def load_usage(self) -> Dict[str, Dict[str, float]]:
        raw = self._read(USAGE_DATA_KEY, {})
        if not isinstance(raw, dict):
            logger.warning("Ignoring malformed %s: expected an object", USAGE_DATA_KEY)
            return {}
        usage = {}
        for key, info in raw.items():
            if not isinstance(info, dict):
                logger.warning("Skipping malformed usage entry for %s", key)
                continue
            usage[key] = info
        return usage

    def save_usage(self, usage: Dict[str, Dict[str, float]]) -> None:
        self._write(USAGE_DATA_KEY, usage)

    def default_usage(self, appliance: Appliance) -> Dict[str, float]:
        return {"hoursPerDay": appliance.default_hours, "dutyCycle": appliance.default_duty}

    # --- selection edits ---

    def initialize_session(self) -> None:
        """Preselect the idle-draw items for a brand-new session."""
        if self.has(SELECTED_APPLIANCES_KEY):
            return
        selected = [(a, 1) for a in self.catalog.idle_draw]
        usage = {a.id: {"hoursPerDay": 24.0, "dutyCycle": a.default_duty} for a in self.catalog.idle_draw}
        self.save_selected_appliances(selected)
        self.save_usage(usage)
        logger.info("New session: preselected %d idle-draw items", len(selected))

    def toggle_appliance(self, appliance_id: str) -> bool:
        """Select or deselect an appliance. Returns the new selection state."""
        appliance = self.catalog[appliance_id]
        selected = self.load_selected_appliances()
        usage = self.load_usage()
        if any(a.id == appliance_id for a, _ in selected):
            selected = [(a, q) for a, q in selected if a.id != appliance_id]
            usage.pop(appliance_id, None)
            now_selected = False
        else:
            selected.append((appliance, 1))
            usage[appliance_id] = self.default_usage(appliance)
            now_selected = True
        # Keep catalog order like the selector shows it
        order = {a.id: i for i, a in enumerate(self.catalog)}
        selected.sort(key=lambda pair: order.get(pair[0].id, len(order)))
        self.save_selected_appliances(selected)
        self.save_usage(usage)
        logger.info("%s %s", "Selected" if now_selected else "Deselected", appliance_id)
        return now_selected

    def set_selection(self, appliance_id: str, selected: bool) -> None:
        if (appliance_id in self.selected_ids()) != selected:
            self.toggle_appliance(appliance_id)

    def set_quantity(self, appliance_id: str, quantity: Any) -> None:
        try:
            qty = max(1, int(quantity))
        except (TypeError, ValueError):
            qty = 1
        selected = self.load_selected_appliances()
        if not any(a.id == appliance_id for a, _ in selected):
            self.toggle_appliance(appliance_id)
            selected = self.load_selected_appliances()
        self.save_selected_appliances([(a, qty if a.id == appliance_id else q) for a, q in selected])

    def _update_usage(self, appliance_id: str, field: str, value: float) -> None:
        usage = self.load_usage()
        appliance = self.catalog.get(appliance_id)
        entry = usage.get(appliance_id) or (self.default_usage(appliance) if appliance else {})
        entry = dict(entry)
        entry[field] = value
        usage[appliance_id] = entry
        self.save_usage(usage)

    def set_hours(self, appliance_id: str, hours: Any) -> None:
        try:
            hrs = max(0.0, float(hours))
        except (TypeError, ValueError):
            hrs = 0.0
        self._update_usage(appliance_id, "hoursPerDay", hrs)

    def set_duty_cycle(self, appliance_id: str, duty_cycle: Any) -> None:
        try:
            dc = float(duty_cycle)
        except (TypeError, ValueError):
            dc = math.nan
        if not math.isfinite(dc):
            appliance = self.catalog.get(appliance_id)
            dc = appliance.default_duty if appliance else 1.0
            logger.warning("Unusable duty cycle %r for %s; using %.2f", duty_cycle, appliance_id, dc)
        dc = max(0.0, min(1.0, dc))
        self._update_usage(appliance_id, "dutyCycle", dc)

    # --- configs ---

    def _load_model(self, key: str, model, default):
        raw = self._read(key)
        if raw is None:
            return default
        try:
            return model.model_validate(raw)
        except ValidationError as e:
            logger.warning("Ignoring invalid %s: %s", key, e.errors()[0].get("msg", e))
            return default

    def load_battery_config(self) -> BatteryConfig:
        return self._load_model(BATTERY_CONFIG_KEY, BatteryConfig, BatteryConfig())

    def save_battery_config(self, config: BatteryConfig) -> None:
        self._write(BATTERY_CONFIG_KEY, config)

    def load_charging_config(self, default: Optional[ChargingConfig] = None) -> ChargingConfig:
        """Saved charging config; results assume a 50A Orion XS and a generator when none is saved."""
        if default is None:
            default = ChargingConfig(orion_amps=50, has_generator=True)
        return self._load_model(CHARGING_CONFIG_KEY, ChargingConfig, default)

    def save_charging_config(self, config: ChargingConfig) -> None:
        self._write(CHARGING_CONFIG_KEY, config)

    def load_solar_panels(self) -> int:
        raw = self._read(SOLAR_PANELS_KEY, 0)
        try:
            return max(0, int(raw))
        except (TypeError, ValueError):
            logger.warning("Ignoring malformed %s: %r", SOLAR_PANELS_KEY, raw)
            return 0

    def save_solar_panels(self, panels: int) -> None:
        self._write(SOLAR_PANELS_KEY, int(panels))

    def load_solar_config(
        self,
        default_region: Optional[str] = None,
        default_season: Optional[str] = None,
    ) -> SolarConfig:
        """
        Saved solar config. Legacy sunny/overcast entries migrate to the
        desert southwest annual average; without a saved config the panel
        count from the results slider sets the array size.
        """
        raw = self._read(SOLAR_CONFIG_KEY)
        if isinstance(raw, dict):
            migrating = ("sunCondition" in raw or "sun_condition" in raw) and "region" not in raw
            try:
                config = SolarConfig.model_validate(raw)
            except ValidationError as e:
                logger.warning("Ignoring invalid %s: %s", SOLAR_CONFIG_KEY, e.errors()[0].get("msg", e))
            else:
                if migrating:
                    logger.info("Migrated legacy sun condition to %s/%s", config.region, config.season)
                    self.save_solar_config(config)
                return config
        elif raw is not None:
            logger.warning("Ignoring malformed %s: expected an object", SOLAR_CONFIG_KEY)

        fallback = {"solarWatts": self.load_solar_panels() * load_solar_spec().panel_watts}
        if default_region:
            fallback["region"] = default_region
        if default_season:
            fallback["season"] = default_season
        return SolarConfig.model_validate(fallback)

    def save_solar_config(self, config: SolarConfig) -> None:
        self._write(SOLAR_CONFIG_KEY, config)

    # --- results ---

    def build_inputs(
        self,
        default_region: Optional[str] = None,
        default_season: Optional[str] = None,
    ) -> SizingInputs:
        """
        Merge the stored selections and usage into calculation inputs.

        Raises:
            MissingInputError: if no appliances or no usage data are stored
        """
        missing = []
        if not self.has(SELECTED_APPLIANCES_KEY):
            missing.append("selected appliances")
        if not self.has(USAGE_DATA_KEY):
            missing.append("usage data")
        if missing:
            raise MissingInputError(missing)

        usage = self.load_usage()
        items = []
        for appliance, quantity in self.load_selected_appliances():
            info = usage.get(appliance.id) or self.default_usage(appliance)
            try:
                item = ApplianceUsage.from_appliance(
                    appliance,
                    quantity=quantity,
                    hours_per_day=info.get("hoursPerDay"),
                    duty_cycle=info.get("dutyCycle"),
                )
            except ValidationError:
                logger.warning("Ignoring invalid usage for %s; using defaults", appliance.id)
                item = ApplianceUsage.from_appliance(appliance, quantity=quantity)
            items.append(item)
        return SizingInputs(
            appliances=items,
            solar=self.load_solar_config(default_region, default_season),
            battery=self.load_battery_config(),
            charging=self.load_charging_config(),
        )

    def reset(self) -> None:
        """Forget every wizard selection."""
        for key in ALL_KEYS:
            if key in self.backend:
                del self.backend[key]
        logger.info("Wizard state cleared")
