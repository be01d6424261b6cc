"""
Configuration for the shock engine.

Settings are read from a JSON file with kebab-case keys, validated field by
field and frozen into a ``ShockSettings`` snapshot. A reload builds a new
snapshot and swaps it in; nothing mutates a snapshot in place.

Example file:

    {
        "enabled": true,
        "api-token": "...",
        "device-id": "...",
        "intensity": 30,
        "duration-sec": 1.0,
        "on-player-damage": true,
        "intensity-ramping": {"enabled": true, "step-percent": 10}
    }
"""
from __future__ import annotations

import json
import logging
import math
import os
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional, Type, Union

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.openshock.app/"
PLACEHOLDER_TOKEN = "your-api-token-here"
PLACEHOLDER_DEVICE = "your-device-id-here"
DEFAULT_CONFIG_FILE = "vintageshock.json"

_TRUE_STRINGS = ("true", "yes", "on", "1")
_FALSE_STRINGS = ("false", "no", "off", "0")


@dataclass
class ConfigField:
    """Defines a single configuration key."""

    type: Type
    default: Any = None
    description: str = ""
    secret: bool = False  # never written to templates or status output
    min_value: Optional[Union[int, float]] = None
    max_value: Optional[Union[int, float]] = None

    def validate(self, value: Any) -> tuple[bool, str]:
        """Validate a raw value for this field."""
        if value is None:
            return True, ""

        try:
            value = self._convert(value)
        except (ValueError, TypeError, OverflowError):
            return False, f"Invalid type, expected {self.type.__name__}"

        if self.type in (int, float):
            if isinstance(value, float) and not math.isfinite(value):
                return False, "Must be a finite number"
            if self.min_value is not None and value < self.min_value:
                return False, f"Minimum value: {self.min_value}"
            if self.max_value is not None and value > self.max_value:
                return False, f"Maximum value: {self.max_value}"

        return True, ""

    def coerce(self, value: Any) -> Any:
        """Convert a value to the field type, falling back to the default."""
        if value is None:
            return self.default
        try:
            return self._convert(value)
        except (ValueError, TypeError, OverflowError):
            return self.default

    def _convert(self, value: Any) -> Any:
        if self.type is bool:
            if isinstance(value, bool):
                return value
            if isinstance(value, (int, float)):
                return bool(value)
            text = str(value).strip().lower()
            if text in _TRUE_STRINGS:
                return True
            if text in _FALSE_STRINGS:
                return False
            raise ValueError(f"not a boolean: {value!r}")
        if self.type is int and isinstance(value, float):
            if not value.is_integer():
                raise ValueError(f"not an integer: {value!r}")
        if self.type in (int, float) and isinstance(value, bool):
            raise TypeError("booleans are not numbers here")
        return self.type(value)


def string_field(default: str = "", description: str = "", **kwargs) -> ConfigField:
    return ConfigField(str, default=default, description=description, **kwargs)

def int_field(default: int = 0, description: str = "", **kwargs) -> ConfigField:
    return ConfigField(int, default=default, description=description, **kwargs)

def float_field(default: float = 0.0, description: str = "", **kwargs) -> ConfigField:
    return ConfigField(float, default=default, description=description, **kwargs)

def bool_field(default: bool = False, description: str = "", **kwargs) -> ConfigField:
    return ConfigField(bool, default=default, description=description, **kwargs)

def secret_field(default: str = "", description: str = "", **kwargs) -> ConfigField:
    return ConfigField(str, default=default, description=description, secret=True, **kwargs)


# =============================================================================
# Snapshots
# =============================================================================

@dataclass(frozen=True)
class RampConfig:
    """Ramping parameters for one channel (intensity or duration)."""

    enabled: bool = False
    step_percent: float = 10.0
    decay_percent: float = 5.0
    decay_interval_sec: float = 1.0
    max_value: float = 100.0

    @property
    def step_amount(self) -> float:
        return self.max_value * (self.step_percent / 100.0)

    @property
    def decay_amount(self) -> float:
        return self.max_value * (self.decay_percent / 100.0)

    @property
    def decay_interval_ms(self) -> float:
        return self.decay_interval_sec * 1000.0


def _default_intensity_ramp() -> RampConfig:
    return RampConfig(max_value=100.0)


def _default_duration_ramp() -> RampConfig:
    return RampConfig(max_value=5.0)


@dataclass(frozen=True)
class ShockSettings:
    """Immutable configuration snapshot read by the classifier and the engine."""

    enabled: bool = True
    api_url: str = DEFAULT_API_URL
    api_token: str = PLACEHOLDER_TOKEN
    device_id: str = PLACEHOLDER_DEVICE
    intensity: int = 30
    duration_sec: float = 1.0
    on_player_death: bool = True
    on_player_damage: bool = False
    on_player_hurt_other: bool = False
    debug: bool = False
    death_duration_multiplier: float = 1.0
    intensity_ramp: RampConfig = field(default_factory=_default_intensity_ramp)
    duration_ramp: RampConfig = field(default_factory=_default_duration_ramp)

    def is_configured_for_api(self) -> bool:
        """True when token and device are set to something other than the placeholders."""
        return (
            bool(self.api_token) and self.api_token != PLACEHOLDER_TOKEN
            and bool(self.device_id) and self.device_id != PLACEHOLDER_DEVICE
        )

    def to_dict(self, include_secrets: bool = False) -> Dict[str, Any]:
        """Export using the file's key names."""
        data: Dict[str, Any] = {}
        for key, field_def in SETTINGS_FIELDS.items():
            if field_def.secret and not include_secrets:
                continue
            data[key] = getattr(self, _attr(key))
        for section, attr in RAMP_SECTIONS.items():
            ramp = getattr(self, attr)
            data[section] = {key: getattr(ramp, _attr(key)) for key in RAMP_FIELDS}
        return data


SETTINGS_FIELDS: Dict[str, ConfigField] = {
    "enabled": bool_field(True, "Master switch"),
    "api-url": string_field(DEFAULT_API_URL, "OpenShock API base URL"),
    "api-token": secret_field(PLACEHOLDER_TOKEN, "OpenShock API token"),
    "device-id": string_field(PLACEHOLDER_DEVICE, "Shocker id"),
    "intensity": int_field(30, "Base intensity (percent)", min_value=0, max_value=100),
    "duration-sec": float_field(1.0, "Base duration in seconds", min_value=0.0),
    "on-player-death": bool_field(True, "Shock when the player dies"),
    "on-player-damage": bool_field(False, "Shock when the player takes damage"),
    "on-player-hurt-other": bool_field(False, "Shock when the player hurts something"),
    "debug": bool_field(False, "Log every classified event at INFO"),
    "death-duration-multiplier": float_field(1.0, "Duration multiplier for death shocks", min_value=0.0),
}

RAMP_FIELDS: Dict[str, ConfigField] = {
    "enabled": bool_field(False, "Ramp this channel"),
    "step-percent": float_field(10.0, "Percent of max added per trigger", min_value=0.0, max_value=100.0),
    "decay-percent": float_field(5.0, "Percent of max removed per interval", min_value=0.0, max_value=100.0),
    "decay-interval-sec": float_field(1.0, "Seconds between decay steps", min_value=0.0),
    "max-value": float_field(100.0, "Ramp ceiling", min_value=0.0),
}

RAMP_SECTIONS: Dict[str, str] = {
    "intensity-ramping": "intensity_ramp",
    "duration-ramping": "duration_ramp",
}


def _attr(key: str) -> str:
    return key.replace("-", "_")


def _read_fields(data: Dict[str, Any], field_defs: Dict[str, ConfigField],
                 defaults: Any, where: str) -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for key, field_def in field_defs.items():
        if key not in data:
            continue
        raw = data[key]
        valid, error = field_def.validate(raw)
        if not valid:
            logger.warning(f"Config '{where}{key}': {error}, keeping {getattr(defaults, _attr(key))!r}")
            continue
        values[_attr(key)] = field_def.coerce(raw)
    return values


def settings_from_dict(data: Dict[str, Any]) -> ShockSettings:
    """Build a snapshot from a parsed config mapping. Invalid keys keep their defaults."""
    defaults = ShockSettings()
    values = _read_fields(data, SETTINGS_FIELDS, defaults, "")

    for section, attr in RAMP_SECTIONS.items():
        ramp_default = getattr(defaults, attr)
        raw = data.get(section)
        if raw is None:
            continue
        if not isinstance(raw, dict):
            logger.warning(f"Config '{section}' must be an object, ignoring")
            continue
        ramp_values = _read_fields(raw, RAMP_FIELDS, ramp_default, f"{section}.")
        merged = {f.name: getattr(ramp_default, f.name) for f in fields(RampConfig)}
        merged.update(ramp_values)
        values[attr] = RampConfig(**merged)

    known = set(SETTINGS_FIELDS) | set(RAMP_SECTIONS)
    for key in data:
        if key not in known:
            logger.debug(f"Ignoring unknown config key '{key}'")

    return ShockSettings(**values)


def load_settings(path: Optional[str]) -> ShockSettings:
    """Load settings from ``path``. Any failure falls back to defaults."""
    if not path or not os.path.exists(path):
        logger.warning(f"Config not found at {path}, using defaults")
        return ShockSettings()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Error loading config: {e}. Using defaults.")
        return ShockSettings()

    if not isinstance(data, dict):
        logger.warning("Config root must be an object. Using defaults.")
        return ShockSettings()

    settings = settings_from_dict(data)
    logger.info(f"Configuration loaded from {path}")
    return settings


def save_settings(settings: ShockSettings, path: str, include_secrets: bool = False) -> bool:
    """Write ``settings`` to ``path``. Returns False on failure."""
    try:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(settings.to_dict(include_secrets=include_secrets), f, indent=2, ensure_ascii=False)
        return True
    except OSError as e:
        logger.error(f"Error saving config to {path}: {e}")
        return False


class ShockConfig:
    """
    Binds a config file path to the current settings snapshot.

    Usage:
        config = ShockConfig("vintageshock.json")
        settings = config.load()
        ...
        settings = config.reload()
    """

    def __init__(self, path: Optional[str] = DEFAULT_CONFIG_FILE):
        self._path = path
        self._settings = ShockSettings()

    @property
    def path(self) -> Optional[str]:
        return self._path

    @property
    def settings(self) -> ShockSettings:
        return self._settings

    def load(self) -> ShockSettings:
        """Read the file and replace the current snapshot."""
        self._settings = load_settings(self._path)
        return self._settings

    reload = load

    def save_template(self, include_secrets: bool = False) -> bool:
        """Write the current snapshot to the bound path."""
        if not self._path:
            return False
        return save_settings(self._settings, self._path, include_secrets=include_secrets)

    def get_schema(self) -> Dict[str, Dict]:
        """Describe every key, for help output."""
        schema = {}
        for key, field_def in SETTINGS_FIELDS.items():
            schema[key] = _describe(field_def)
        for section in RAMP_SECTIONS:
            for key, field_def in RAMP_FIELDS.items():
                schema[f"{section}.{key}"] = _describe(field_def)
        return schema


def _describe(field_def: ConfigField) -> Dict[str, Any]:
    return {
        "type": field_def.type.__name__,
        "default": field_def.default,
        "description": field_def.description,
        "secret": field_def.secret,
        "min": field_def.min_value,
        "max": field_def.max_value,
    }
