"""
MOONPOINTER Configuration System

Configuration management using pydantic for type-safe validation and YAML
for human-readable config files.

Configuration loading priority:
1. Environment variables (MOONPOINTER_*)
2. Config file passed to load_config() / --config
3. ./moonpointer.yaml (current directory)
4. ~/.moonpointer/config.yaml (user home)
5. Built-in defaults

Usage:
    from moonpointer.config import load_config

    config = load_config()
    print(config.ephemeris.backend)
    print(config.observer.timezone)
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from moonpointer.constants import (
    CONFIG_ENV_PREFIX,
    DEFAULT_EPHEMERIS_FILE,
    MOON_HORIZON_OFFSET_DEG,
    SLIDER_MAX_DEG,
    SLIDER_MIN_DEG,
)
from moonpointer.exceptions import ConfigurationError

__all__ = [
    "MoonPointerConfig",
    "ObserverConfig",
    "EphemerisConfig",
    "OrientationConfig",
    "load_config",
    "get_config_paths",
]


# =============================================================================
# Section Models
# =============================================================================


class ObserverConfig(BaseModel):
    """Observer defaults.

    The timezone decides which calendar day the visibility window covers;
    left unset, the host's local time zone is used.
    Latitude/longitude are only fallbacks for the command line; live fixes
    always come from the location provider.
    """

    timezone: Optional[str] = Field(
        default=None,
        description="IANA timezone identifier used for 'today'; host local time when unset",
    )
    latitude: Optional[float] = Field(
        default=None,
        ge=-90.0,
        le=90.0,
        description="Fallback latitude in decimal degrees (positive = North)",
    )
    longitude: Optional[float] = Field(
        default=None,
        ge=-180.0,
        le=180.0,
        description="Fallback longitude in decimal degrees (positive = East)",
    )

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: Optional[str]) -> Optional[str]:
        """Validate timezone is a plausible IANA identifier."""
        if v is None:
            return v
        if "/" not in v and v not in ("UTC", "GMT"):
            raise ValueError(f"Invalid timezone format: {v}. Use IANA format like 'America/New_York'")
        return v


class EphemerisConfig(BaseModel):
    """Ephemeris engine selection and tuning."""

    backend: Literal["analytic", "skyfield"] = Field(
        default="analytic",
        description="Lunar position engine (analytic series or Skyfield/JPL)",
    )
    ephemeris_file: str = Field(
        default=DEFAULT_EPHEMERIS_FILE,
        description="JPL ephemeris file loaded by the skyfield backend",
    )
    data_dir: Optional[str] = Field(
        default=None,
        description="Directory for downloaded ephemeris files",
    )
    apply_refraction: bool = Field(
        default=True,
        description="Correct analytic altitudes for atmospheric refraction",
    )
    horizon_offset_deg: float = Field(
        default=MOON_HORIZON_OFFSET_DEG,
        ge=-5.0,
        le=5.0,
        description="Altitude of the Moon's centre at rise/set (degrees)",
    )


class OrientationConfig(BaseModel):
    """Heading input settings."""

    allow_manual_override: bool = Field(
        default=True,
        description="Allow a manual slider to replace the compass sensor",
    )
    slider_min: float = Field(
        default=SLIDER_MIN_DEG,
        ge=0.0,
        lt=360.0,
        description="Lowest heading the manual slider produces (degrees)",
    )
    slider_max: float = Field(
        default=SLIDER_MAX_DEG,
        ge=0.0,
        lt=360.0,
        description="Highest heading the manual slider produces (degrees)",
    )

    @model_validator(mode="after")
    def validate_slider_range(self) -> "OrientationConfig":
        """Slider range must be non-empty."""
        if self.slider_min >= self.slider_max:
            raise ValueError(
                f"slider_min ({self.slider_min}) must be below slider_max ({self.slider_max})"
            )
        return self


# =============================================================================
# Master Configuration
# =============================================================================


class MoonPointerConfig(BaseModel):
    """Top-level configuration aggregating all sections."""

    model_config = ConfigDict(extra="ignore")

    observer: ObserverConfig = Field(default_factory=ObserverConfig)
    ephemeris: EphemerisConfig = Field(default_factory=EphemerisConfig)
    orientation: OrientationConfig = Field(default_factory=OrientationConfig)

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Global logging level",
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional rotating log file path",
    )
    service_log_levels: dict[str, Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = Field(
        default_factory=dict,
        description="Per-service levels, e.g. {ephemeris: DEBUG}",
    )


# =============================================================================
# Configuration Loading
# =============================================================================


def get_config_paths() -> list[Path]:
    """Config file paths to search, in priority order (first found wins)."""
    home = Path.home()
    return [
        Path("./moonpointer.yaml"),
        Path("./moonpointer.yml"),
        home / ".moonpointer" / "config.yaml",
        home / ".moonpointer" / "config.yml",
        Path("/etc/moonpointer/config.yaml"),
    ]


def _apply_env_overrides(config_dict: dict) -> dict:
    """Apply environment variable overrides.

    Variables are named MOONPOINTER_SECTION_KEY, e.g.
    MOONPOINTER_EPHEMERIS_BACKEND=skyfield -> ephemeris.backend.
    MOONPOINTER_LOG_LEVEL and MOONPOINTER_LOG_FILE set top-level keys.
    """
    for key, value in os.environ.items():
        if not key.startswith(CONFIG_ENV_PREFIX):
            continue

        name = key[len(CONFIG_ENV_PREFIX):].lower()
        if name in ("log_level", "log_file"):
            config_dict[name] = value.upper() if name == "log_level" else value
            continue

        parts = name.split("_")
        if len(parts) < 2:
            continue

        section = parts[0]
        setting = "_".join(parts[1:])

        if not isinstance(config_dict.get(section), dict):
            config_dict[section] = {}

        if value.lower() in ("true", "false"):
            value = value.lower() == "true"
        elif value.isdigit():
            value = int(value)
        else:
            try:
                value = float(value)
            except ValueError:
                pass  # Keep as string

        config_dict[section][setting] = value

    return config_dict


def load_config(config_path: Optional[str | Path] = None) -> MoonPointerConfig:
    """Load configuration from file with validation.

    Args:
        config_path: Explicit config file path, or None for auto-discovery

    Returns:
        Validated MoonPointerConfig object

    Raises:
        ConfigurationError: If the config file is missing, unreadable or invalid
    """
    config_dict: dict = {}

    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}")
        config_files = [path]
    else:
        config_files = get_config_paths()

    for path in config_files:
        if path.exists():
            try:
                with open(path, encoding="utf-8") as f:
                    config_dict = yaml.safe_load(f) or {}
                break
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
            except OSError as e:
                raise ConfigurationError(f"Cannot read {path}: {e}") from e

    if not isinstance(config_dict, dict):
        raise ConfigurationError("Configuration root must be a mapping")

    config_dict = _apply_env_overrides(config_dict)

    try:
        return MoonPointerConfig(**config_dict)
    except Exception as e:
        raise ConfigurationError(f"Configuration validation failed: {e}") from e
