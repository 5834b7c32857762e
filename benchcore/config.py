"""
Core configuration constants for the provider comparison pipeline.

Single source of truth for provider names, input location and matching
strictness. Every key in _ENV_OVERRIDABLE can be overridden with a
``BENCH_<KEY>`` environment variable.
"""

import os
from typing import Dict, Any
from benchcore.exceptions import ConfigError


# Default configuration - all required keys with correct types
_DEFAULTS: Dict[str, Any] = {
    # JMH @Param that names the provider a run was measured under.
    "PROVIDER_PARAM": "providerName",

    # The two providers under comparison. Ratios are PROVIDER_B / PROVIDER_A.
    "PROVIDER_A": "BC",
    "PROVIDER_B": "Jostle",

    # JMH result file, or a directory of *.json result files.
    "RESULTS_PATH": "results/jmh-results.json",

    # Matching strictness. False keeps the load going and records an anomaly
    # (last-write-wins for duplicates, first-seen unit for mismatches);
    # True raises DuplicateProviderEntry / UnitMismatch instead.
    "STRICT_DUPLICATES": False,
    "STRICT_UNITS": False,

    "LOG_LEVEL": "INFO",
}

# Required keys with their expected types
_REQUIRED_KEYS = {
    "PROVIDER_PARAM": str,
    "PROVIDER_A": str,
    "PROVIDER_B": str,
    "RESULTS_PATH": str,
    "STRICT_DUPLICATES": bool,
    "STRICT_UNITS": bool,
    "LOG_LEVEL": str,
}

# Keys that can be overridden by environment variables
_ENV_OVERRIDABLE = {
    "PROVIDER_PARAM",
    "PROVIDER_A",
    "PROVIDER_B",
    "RESULTS_PATH",
    "STRICT_DUPLICATES",
    "STRICT_UNITS",
    "LOG_LEVEL",
}

ENV_PREFIX = "BENCH_"

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def validate_config(cfg: Dict[str, Any]) -> None:
    """
    Ensure all required keys exist with correct types/values.
    Raise ConfigError("<reason>") on any violation.
    """
    missing_keys = set(_REQUIRED_KEYS.keys()) - set(cfg.keys())
    if missing_keys:
        raise ConfigError(f"CONFIG missing required keys: {', '.join(sorted(missing_keys))}")

    for key, expected_type in _REQUIRED_KEYS.items():
        value = cfg[key]
        if not isinstance(value, expected_type):
            raise ConfigError(f"CONFIG[{key}] must be {expected_type.__name__}, got {type(value).__name__}")

    for key in ("PROVIDER_PARAM", "PROVIDER_A", "PROVIDER_B", "RESULTS_PATH"):
        if not cfg[key].strip():
            raise ConfigError(f"CONFIG[{key}] must be non-empty string, got {repr(cfg[key])}")

    if cfg["PROVIDER_A"].strip().lower() == cfg["PROVIDER_B"].strip().lower():
        raise ConfigError(
            f"CONFIG[PROVIDER_A] and CONFIG[PROVIDER_B] must differ, both are {cfg['PROVIDER_A']!r}"
        )

    if cfg["LOG_LEVEL"].upper() not in _LOG_LEVELS:
        raise ConfigError(f"CONFIG[LOG_LEVEL] must be one of {sorted(_LOG_LEVELS)}, got {cfg['LOG_LEVEL']!r}")


def _apply_env_overrides(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Apply environment variable overrides to config."""
    result = cfg.copy()

    for key in _ENV_OVERRIDABLE:
        env_var = ENV_PREFIX + key
        if env_var in os.environ:
            env_value = os.environ[env_var]
            expected_type = _REQUIRED_KEYS.get(key)
            if expected_type is None:
                raise ConfigError(f"Unsupported env override key: {env_var}")

            try:
                if expected_type == str:
                    result[key] = str(env_value)
                elif expected_type == bool:
                    lowered = str(env_value).strip().lower()
                    if lowered in {"1", "true", "yes", "on"}:
                        result[key] = True
                    elif lowered in {"0", "false", "no", "off"}:
                        result[key] = False
                    else:
                        raise ValueError(f"invalid boolean literal: {env_value}")
                else:
                    raise ConfigError(f"Unsupported type for env override: {expected_type}")
            except ValueError:
                raise ConfigError(f"Invalid {expected_type.__name__} value for {env_var}: {env_value}")

    return result


def refresh_config() -> Dict[str, Any]:
    """Rebuild CONFIG in place from defaults plus the current environment."""
    fresh = _apply_env_overrides(_DEFAULTS)
    validate_config(fresh)
    CONFIG.clear()
    CONFIG.update(fresh)
    return CONFIG


# Apply environment overrides and validate
CONFIG: Dict[str, Any] = _apply_env_overrides(_DEFAULTS)
validate_config(CONFIG)
