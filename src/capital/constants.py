"""Stable constants shared across the config, schema and transfer layers."""

from __future__ import annotations

from typing import Final

# Persisted document names (relative to the data directory).
CONFIG_FILE_NAME: Final[str] = "config.yml"
BACKUP_SUFFIX: Final[str] = ".old"

# Keys starting with this marker hold documentation for the sibling key of the same name.
DOC_MARKER: Final[str] = "#"

# Environment variable prefix for process settings.
ENV_PREFIX: Final[str] = "CAPITAL_"

DEFAULT_DATA_DIR: Final[str] = "data"
DEFAULT_LOGGER_NAME: Final[str] = "capital"

FRESH_DOCUMENT_HEADER: Final[str] = (
    "This is the main config file of Capital.\n"
    "You can change the values in this file to configure Capital.\n"
    "If you change some main settings that change the structure (e.g. schema), Capital will try its best\n"
    "to migrate your previous settings to the new structure and overwrite this file.\n"
    "The previous file will be stored in config.yml.old.\n"
)

__all__ = [
    "BACKUP_SUFFIX",
    "CONFIG_FILE_NAME",
    "DEFAULT_DATA_DIR",
    "DEFAULT_LOGGER_NAME",
    "DOC_MARKER",
    "ENV_PREFIX",
    "FRESH_DOCUMENT_HEADER",
]
