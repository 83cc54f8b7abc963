"""
capital — process settings

File: src/capital/settings.py

Purpose
- Resolve the handful of settings the process needs before any config module is
  parsed: where ``config.yml`` lives and how to log.

Functional requirements
- Precedence: CLI > env (``CAPITAL_``) > defaults.
- Deterministic coercion of environment strings; invalid values raise ``SettingsError``.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from capital.constants import DEFAULT_DATA_DIR, ENV_PREFIX

_BOOLEAN_TRUE: Final[frozenset[str]] = frozenset({"1", "true", "t", "yes", "y", "on"})
_BOOLEAN_FALSE: Final[frozenset[str]] = frozenset({"0", "false", "f", "no", "n", "off"})
_LOG_LEVELS: Final[frozenset[str]] = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

ENV_DATA_DIR: Final[str] = f"{ENV_PREFIX}DATA_DIR"
ENV_LOG_LEVEL: Final[str] = f"{ENV_PREFIX}LOG_LEVEL"
ENV_LOG_JSON: Final[str] = f"{ENV_PREFIX}LOG_JSON"
ENV_LOG_FILE: Final[str] = f"{ENV_PREFIX}LOG_FILE"


class SettingsError(ValueError):
    """Raised when environment or CLI settings cannot be coerced."""


@dataclass(frozen=True, slots=True)
class AppSettings:
    data_dir: Path = Path(DEFAULT_DATA_DIR)
    log_level: str = "INFO"
    log_json: bool = True
    log_file: Path | None = None

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level)  # type: ignore[no-any-return]


def load_settings(
    *,
    environ: Mapping[str, str] | None = None,
    cli_overrides: Mapping[str, object] | None = None,
) -> AppSettings:
    """Load effective settings with precedence CLI > env > defaults.

    ``cli_overrides`` keys are field names; ``None`` values are ignored so an
    argparse namespace can be passed through unfiltered.
    """

    env_map = dict(os.environ if environ is None else environ)
    cli_map = {key: value for key, value in (cli_overrides or {}).items() if value is not None}
    defaults = AppSettings()

    data_dir = _env_str(env_map, ENV_DATA_DIR)
    log_level = _env_str(env_map, ENV_LOG_LEVEL)
    log_json = _env_bool(env_map, ENV_LOG_JSON)
    log_file = _env_str(env_map, ENV_LOG_FILE)

    if "data_dir" in cli_map:
        data_dir = str(cli_map["data_dir"])
    if "log_level" in cli_map:
        log_level = str(cli_map["log_level"])
    if "log_json" in cli_map:
        raw = cli_map["log_json"]
        if not isinstance(raw, bool):
            raise SettingsError(f"log_json override must be a bool, got {type(raw).__name__}")
        log_json = raw
    if "log_file" in cli_map:
        log_file = str(cli_map["log_file"])

    return AppSettings(
        data_dir=Path(data_dir) if data_dir else defaults.data_dir,
        log_level=_normalize_level(log_level) if log_level else defaults.log_level,
        log_json=defaults.log_json if log_json is None else log_json,
        log_file=Path(log_file) if log_file else defaults.log_file,
    )


def _env_str(env_map: Mapping[str, str], name: str) -> str | None:
    raw = env_map.get(name)
    if raw is None:
        return None
    value = raw.strip()
    return value or None


def _env_bool(env_map: Mapping[str, str], name: str) -> bool | None:
    value = _env_str(env_map, name)
    if value is None:
        return None
    lowered = value.lower()
    if lowered in _BOOLEAN_TRUE:
        return True
    if lowered in _BOOLEAN_FALSE:
        return False
    raise SettingsError(f"{name} must be a boolean (true/false/1/0/yes/no/on/off)")


def _normalize_level(value: str) -> str:
    normalized = value.strip().upper()
    if normalized == "WARN":
        normalized = "WARNING"
    if normalized not in _LOG_LEVELS:
        raise SettingsError(f"unsupported log level: {value!r}")
    return normalized


__all__ = [
    "AppSettings",
    "ENV_DATA_DIR",
    "ENV_LOG_FILE",
    "ENV_LOG_JSON",
    "ENV_LOG_LEVEL",
    "SettingsError",
    "load_settings",
]
