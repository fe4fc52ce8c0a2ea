"""
Configuration & Path Management
===============================

Central registry for packaged data paths and environment-driven settings.

Environment variables:
    RVPOWER_LOG_LEVEL: Logging level name (default INFO)
    RVPOWER_LOG_FILE: Optional log file path
    RVPOWER_STATE_FILE: Wizard state file used by the CLI
    RVPOWER_DEFAULT_REGION: Region preselected for new sessions
    RVPOWER_DEFAULT_SEASON: Season preselected for new sessions
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


DATA_PATH: Path = Path(__file__).parent / "data"
APPLIANCES_PATH: Path = DATA_PATH / "appliances.json"
BATTERY_PATH: Path = DATA_PATH / "battery.json"
SOLAR_PATH: Path = DATA_PATH / "solar.json"
REGIONS_PATH: Path = DATA_PATH / "regions.json"
CHARGING_PATH: Path = DATA_PATH / "charging.json"


class Settings(BaseModel):
    log_level: str = Field("INFO", description="Logging level name.")
    log_file: Optional[str] = Field(None, description="Optional log file path.")
    state_file: Path = Field(
        default_factory=lambda: Path.home() / ".rvpower_state.json",
        description="JSON file holding CLI wizard state.",
    )
    default_region: str = Field("desert_southwest", description="Region preselected for new sessions.")
    default_season: str = Field("annual", description="Season preselected for new sessions.")

    @classmethod
    def from_env(cls) -> "Settings":
        data = {}
        if os.getenv("RVPOWER_LOG_LEVEL"):
            data["log_level"] = os.getenv("RVPOWER_LOG_LEVEL", "INFO").upper()
        if os.getenv("RVPOWER_LOG_FILE"):
            data["log_file"] = os.getenv("RVPOWER_LOG_FILE")
        if os.getenv("RVPOWER_STATE_FILE"):
            data["state_file"] = Path(os.getenv("RVPOWER_STATE_FILE", ""))
        if os.getenv("RVPOWER_DEFAULT_REGION"):
            data["default_region"] = os.getenv("RVPOWER_DEFAULT_REGION")
        if os.getenv("RVPOWER_DEFAULT_SEASON"):
            data["default_season"] = os.getenv("RVPOWER_DEFAULT_SEASON")
        return cls(**data)
