"""Config document, parser and coordinated loader."""

from capital.config.document import MISSING, ConfigDocument, Repair
from capital.config.errors import (
    ConfigException,
    ConfigRegenerationError,
    RegistrationError,
    TypeMismatchError,
)
from capital.config.loader import (
    ConfigLoader,
    LoadedConfigs,
    LoadPhase,
    LoadReport,
    LoadState,
    dump_document,
    read_document,
)
from capital.config.modules import ConfigModule, module_name
from capital.config.parser import Parser

__all__ = [
    "MISSING",
    "ConfigDocument",
    "ConfigException",
    "ConfigLoader",
    "ConfigModule",
    "ConfigRegenerationError",
    "LoadPhase",
    "LoadReport",
    "LoadState",
    "LoadedConfigs",
    "Parser",
    "RegistrationError",
    "Repair",
    "TypeMismatchError",
    "dump_document",
    "module_name",
    "read_document",
]
