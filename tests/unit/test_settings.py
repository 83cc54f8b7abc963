from __future__ import annotations

import logging
from pathlib import Path

import pytest

from capital.settings import (
    ENV_DATA_DIR,
    ENV_LOG_FILE,
    ENV_LOG_JSON,
    ENV_LOG_LEVEL,
    AppSettings,
    SettingsError,
    load_settings,
)


def test_defaults_without_env_or_cli() -> None:
    settings = load_settings(environ={})

    assert settings == AppSettings()
    assert settings.data_dir == Path("data")
    assert settings.log_level_number == logging.INFO


def test_env_values_are_coerced() -> None:
    settings = load_settings(
        environ={
            ENV_DATA_DIR: " /srv/capital ",
            ENV_LOG_LEVEL: "warn",
            ENV_LOG_JSON: "off",
            ENV_LOG_FILE: "/var/log/capital.jsonl",
        }
    )

    assert settings.data_dir == Path("/srv/capital")
    assert settings.log_level == "WARNING"
    assert settings.log_json is False
    assert settings.log_file == Path("/var/log/capital.jsonl")


def test_cli_overrides_env_and_ignores_none() -> None:
    settings = load_settings(
        environ={ENV_DATA_DIR: "/from/env", ENV_LOG_LEVEL: "ERROR"},
        cli_overrides={"data_dir": "/from/cli", "log_level": None, "log_json": False},
    )

    assert settings.data_dir == Path("/from/cli")
    assert settings.log_level == "ERROR"
    assert settings.log_json is False


def test_blank_env_values_fall_back_to_defaults() -> None:
    settings = load_settings(environ={ENV_DATA_DIR: "   ", ENV_LOG_JSON: ""})
    assert settings == AppSettings()


@pytest.mark.parametrize(
    ("environ", "overrides", "message"),
    [
        ({ENV_LOG_JSON: "maybe"}, None, ENV_LOG_JSON),
        ({ENV_LOG_LEVEL: "chatty"}, None, "unsupported log level"),
        ({}, {"log_level": "verbose"}, "unsupported log level"),
        ({}, {"log_json": "yes"}, "must be a bool"),
    ],
)
def test_invalid_values_raise_settings_error(
    environ: dict[str, str], overrides: dict[str, object] | None, message: str
) -> None:
    with pytest.raises(SettingsError, match=message):
        load_settings(environ=environ, cli_overrides=overrides)
