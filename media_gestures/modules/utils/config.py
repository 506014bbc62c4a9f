"""
Engine configuration: a YAML file read once into a shared manager, and
the typed ``EngineConfig`` record the engine consumes.

The YAML has three top-level sections:

    engine:    base thresholds and switches (keys of EngineConfig)
    profiles:  named partial overrides of ``engine`` (e.g. youtube)
    logging:   level, log_file, max_size_mb, backup_count

Type mismatches are logged as warnings at load time. Building the record
raises ConfigError for any mistyped or out-of-range value.
"""

import os
import logging
from dataclasses import dataclass, fields, replace

import yaml

from media_gestures.core.types import ConfigError

logger = logging.getLogger(__name__)

_PACKAGE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
DEFAULT_CONFIG_PATH = os.path.join(_PACKAGE_DIR, "config", "config.yaml")

TWO_FIST_ACTIONS = ("toggle_playback", "fullscreen")

_ENGINE_TYPES = {
    "extension_margin": float,
    "thumb_margin": float,
    "pinch_threshold_px": float,
    "pinch_min_hold_ms": float,
    "tap_max_duration_ms": float,
    "double_tap_window_ms": float,
    "discrete_cooldown_ms": float,
    "volume_sensitivity": float,
    "seek_sensitivity": float,
    "coarse_seek_seconds": float,
    "mirror_input": bool,
    "two_fist_action": str,
    "release_pinch_on_fist": bool,
    "notifications": bool,
}

_LOGGING_TYPES = {
    "level": str,
    "max_size_mb": float,
    "backup_count": int,
}


def _type_problems(where: str, section, types: dict) -> list:
    """Describe every value in ``section`` whose type does not match ``types``."""
    if not isinstance(section, dict):
        return [f"{where} should be a mapping, got {type(section).__name__}"]
    problems = []
    for key, expected in types.items():
        if key not in section:
            continue
        value = section[key]
        if isinstance(value, bool) and expected is not bool:
            ok = False
        elif expected is float:
            ok = isinstance(value, (int, float))
        else:
            ok = isinstance(value, expected)
        if not ok:
            problems.append(f"{where}.{key}: expected {expected.__name__}, got {value!r}")
    return problems


def _layer(base: dict, *overrides) -> dict:
    """Shallow-merge override mappings onto a copy of ``base``, last wins."""
    merged = dict(base)
    for override in overrides:
        merged.update(override or {})
    return merged


@dataclass(frozen=True)
class EngineConfig:
    """Tunable thresholds and behavior switches for the gesture engine.

    Distances are detection-surface pixels, durations milliseconds.
    """
    extension_margin: float = 0.02
    thumb_margin: float = 0.02
    pinch_threshold_px: float = 50
    pinch_min_hold_ms: float = 300
    tap_max_duration_ms: float = 300
    double_tap_window_ms: float = 600
    discrete_cooldown_ms: float = 1200
    volume_sensitivity: float = 0.002
    seek_sensitivity: float = 0.08
    coarse_seek_seconds: float = 10
    mirror_input: bool = True
    two_fist_action: str = "toggle_playback"  # toggle_playback or fullscreen
    release_pinch_on_fist: bool = True
    notifications: bool = True

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if f.type is float:
                ok = isinstance(value, (int, float)) and not isinstance(value, bool)
            else:
                ok = isinstance(value, f.type)
            if not ok:
                raise ConfigError(
                    f"{f.name} must be {f.type.__name__}, got {type(value).__name__} ({value!r})"
                )
        if self.two_fist_action not in TWO_FIST_ACTIONS:
            raise ConfigError(
                f"two_fist_action must be one of {TWO_FIST_ACTIONS}, got {self.two_fist_action!r}"
            )
        for name in ("pinch_threshold_px", "discrete_cooldown_ms", "double_tap_window_ms"):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must be non-negative")

    @classmethod
    def from_dict(cls, d: dict) -> "EngineConfig":
        """Create config from dictionary, ignoring unknown keys."""
        d = d or {}
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(d) - known)
        if unknown:
            logger.warning("Ignoring unknown engine config keys: %s", ", ".join(unknown))
        return cls(**{k: v for k, v in d.items() if k in known})

    def with_overrides(self, **overrides) -> "EngineConfig":
        return replace(self, **overrides)


class Config:
    """Process-wide configuration loaded from YAML."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._data = {}
            cls._instance._path = None
        return cls._instance

    def load(self, config_path=None):
        """Read ``config_path`` (bundled config.yaml by default); a missing file means defaults."""
        path = config_path or DEFAULT_CONFIG_PATH
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f)
        except FileNotFoundError:
            logger.warning("Config file not found: %s, using built-in defaults", path)
            data = None
        else:
            logger.info("Loaded config from %s", path)
        self._path = path
        return self.load_dict(data)

    def load_dict(self, data: dict):
        """Use an in-memory mapping as the configuration."""
        self._data = dict(data or {})
        for problem in self.check():
            logger.warning("Config: %s", problem)
        return self

    def check(self) -> list:
        """Type problems in the loaded data, one message per value."""
        problems = []
        if "engine" in self._data:
            problems += _type_problems("engine", self._data["engine"], _ENGINE_TYPES)
        for name, profile in (self._data.get("profiles") or {}).items():
            problems += _type_problems(f"profiles.{name}", profile or {}, _ENGINE_TYPES)
        if "logging" in self._data:
            problems += _type_problems("logging", self._data["logging"], _LOGGING_TYPES)
        return problems

    def get(self, key_path: str, default=None):
        """Look up a dotted path such as ``engine.pinch_threshold_px``."""
        node = self._data
        for key in key_path.split("."):
            if not isinstance(node, dict) or key not in node:
                return default
            node = node[key]
        return node

    def get_section(self, section: str) -> dict:
        return self._data.get(section) or {}

    @property
    def engine(self) -> dict:
        return self.get_section("engine")

    @property
    def profiles(self) -> dict:
        return self.get_section("profiles")

    @property
    def logging(self) -> dict:
        return self.get_section("logging")

    @property
    def path(self):
        """File the data came from, or None for ``load_dict``/not loaded."""
        return self._path

    def engine_config(self, profile: str = None) -> EngineConfig:
        """Build the typed engine config, layering a named profile over ``engine``.

        Raises:
            ConfigError: unknown profile or invalid value
        """
        if not profile or profile == "default":
            return EngineConfig.from_dict(self.engine)
        if profile not in self.profiles:
            available = ", ".join(sorted(self.profiles)) or "none"
            raise ConfigError(f"Unknown profile {profile!r}; available: {available}")
        logger.info("Using engine profile: %s", profile)
        return EngineConfig.from_dict(_layer(self.engine, self.profiles[profile]))

    @classmethod
    def reset(cls):
        """Drop the shared instance (for testing)."""
        cls._instance = None
