"""
capital — coordinated config loader

File: src/capital/config/loader.py

Purpose
- Parse every registered config module from ``config.yml`` in one coordinated
  pass and hand each module its typed config.

Functional requirements
- Single flight: however many callers request configs concurrently, one pass
  runs; callers that arrive mid-pass resume in FIFO order once it commits.
- A ``ConfigException`` from any module discards the whole pass, archives the
  document to the first free ``config.yml.old[.N]`` and re-parses every module
  against an empty document. A failure of that second pass is fatal.
- The document is written back when it was generated from scratch or when any
  value was repaired during the pass.
- A module's ``parse`` may await another module's config; inside a pass that
  resolves as soon as the other module's parse task finishes.

Non-functional requirements
- No locks: all coordination happens between await points on one event loop.
"""

from __future__ import annotations

import asyncio
import contextvars
import enum
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Final, TypeVar

import yaml

from capital.config.document import ConfigDocument, Repair
from capital.config.errors import (
    ConfigException,
    ConfigRegenerationError,
    RegistrationError,
    TypeMismatchError,
)
from capital.config.modules import module_name
from capital.config.parser import Parser
from capital.constants import CONFIG_FILE_NAME
from capital.di.registry import ServiceRegistry
from capital.settings import AppSettings
from capital.utils.concurrency import FlightState, SingleFlight, join_all
from capital.utils.fs import archive_file, atomic_write

logger = logging.getLogger(__name__)

M = TypeVar("M")

LoadedConfigs = Mapping[type, object]


class LoadPhase(enum.Enum):
    NOT_STARTED = "not_started"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class LoadReport:
    """What the committed pass did to the document."""

    regenerated: bool
    fail_safe: bool
    persisted: bool
    backup_path: Path | None
    repairs: tuple[Repair, ...]


@dataclass(frozen=True, slots=True)
class LoadState:
    """Observable state of the loader: phase, queued joiners and the committed mapping."""

    phase: LoadPhase
    pending: int
    loaded: LoadedConfigs


@dataclass(slots=True)
class _Attempt:
    """One parse-all run over one document (a pass has one or two attempts)."""

    loader: ConfigLoader
    parser: Parser
    tasks: dict[type, asyncio.Task[object]] = field(default_factory=dict)
    waiting_on: dict[type, type] = field(default_factory=dict)

    async def dependency(self, requester: type, module: type) -> object:
        if module is requester:
            raise RegistrationError(f"{module_name(module)}.parse() cannot load its own config")

        cursor = module
        while cursor in self.waiting_on:
            cursor = self.waiting_on[cursor]
            if cursor is requester:
                raise RegistrationError(
                    f"config dependency cycle between {module_name(requester)} "
                    f"and {module_name(module)}"
                )

        self.waiting_on[requester] = module
        try:
            return await self.tasks[module]
        finally:
            self.waiting_on.pop(requester, None)


@dataclass(frozen=True, slots=True)
class _ActiveParse:
    attempt: _Attempt
    module: type


_ACTIVE_PARSE: contextvars.ContextVar[_ActiveParse | None] = contextvars.ContextVar(
    "capital_active_config_parse", default=None
)


class _DocumentDumper(yaml.SafeDumper):
    pass


def _represent_str(dumper: yaml.SafeDumper, value: str) -> yaml.ScalarNode:
    if "\n" in value:
        return dumper.represent_scalar("tag:yaml.org,2002:str", value, style="|")
    return dumper.represent_scalar("tag:yaml.org,2002:str", value)


_DocumentDumper.add_representer(str, _represent_str)


def dump_document(data: Mapping[str, Any]) -> str:
    """Serialize a config tree to YAML, keeping key order and block-style doc strings."""

    return yaml.dump(
        dict(data),
        Dumper=_DocumentDumper,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )


def read_document(path: Path) -> tuple[ConfigDocument | None, str | None]:
    """Read ``path`` into a document.

    Returns ``(None, None)`` when the file does not exist and
    ``(None, reason)`` when it exists but is not a YAML mapping.
    """

    if not path.exists():
        return None, None

    try:
        with path.open("r", encoding="utf-8") as handle:
            parsed = yaml.safe_load(handle)
    except yaml.YAMLError as exc:
        return None, f"invalid YAML in {path}: {exc}"
    except UnicodeDecodeError as exc:
        return None, f"{path} is not UTF-8 text: {exc}"

    if parsed is None:
        # An empty file is an empty mapping.
        return ConfigDocument({}), None
    if not isinstance(parsed, dict):
        return None, f"config root must be a mapping in {path}, got {type(parsed).__name__}"
    return ConfigDocument(parsed), None


class ConfigLoader:
    """Owns the config document and the single load pass of this process."""

    def __init__(
        self,
        *,
        registry: ServiceRegistry,
        data_dir: Path,
        modules: Sequence[type],
        document: ConfigDocument | None = None,
        unreadable_reason: str | None = None,
    ) -> None:
        if not modules:
            raise ValueError("at least one config module must be registered")
        self._registry = registry
        self._data_dir = Path(data_dir)
        self._modules: tuple[type, ...] = tuple(dict.fromkeys(modules))
        self._parser = Parser(document if document is not None else ConfigDocument.fresh())
        self._unreadable_reason = unreadable_reason
        self._flight: SingleFlight[LoadedConfigs] = SingleFlight()
        self._report: LoadReport | None = None
        self._loaded: LoadedConfigs = MappingProxyType({})
        self._regenerated = False
        self._backup_path: Path | None = None

    @classmethod
    def open(
        cls,
        registry: ServiceRegistry,
        data_dir: Path,
        modules: Sequence[type],
    ) -> ConfigLoader:
        """Create a loader over ``<data_dir>/config.yml`` (fresh document if absent)."""

        data_dir = Path(data_dir)
        document, unreadable_reason = read_document(data_dir / CONFIG_FILE_NAME)
        return cls(
            registry=registry,
            data_dir=data_dir,
            modules=modules,
            document=document,
            unreadable_reason=unreadable_reason,
        )

    @classmethod
    def from_registry(cls, registry: ServiceRegistry, modules: Sequence[type]) -> ConfigLoader:
        """Registry factory: reads the data directory from the stored ``AppSettings``."""

        settings = registry.get(AppSettings)
        return cls.open(registry, settings.data_dir, modules)

    @property
    def config_path(self) -> Path:
        return self._data_dir / CONFIG_FILE_NAME

    @property
    def modules(self) -> tuple[type, ...]:
        return self._modules

    @property
    def parser(self) -> Parser:
        """Top-level parser of the current document."""
        return self._parser

    @property
    def passes(self) -> int:
        """Number of load passes started (never more than one)."""
        return self._flight.runs

    @property
    def phase(self) -> LoadPhase:
        state = self._flight.state
        if state is FlightState.NOT_STARTED:
            return LoadPhase.NOT_STARTED
        if state is FlightState.RUNNING:
            return LoadPhase.LOADING
        return LoadPhase.LOADED if self._report is not None else LoadPhase.FAILED

    @property
    def report(self) -> LoadReport | None:
        return self._report

    @property
    def state(self) -> LoadState:
        return LoadState(phase=self.phase, pending=self._flight.waiting, loaded=self._loaded)

    async def load_config(self, module: type[M]) -> M:
        """Return the parsed config of ``module``, loading all modules on first use."""

        if module not in self._modules:
            raise RegistrationError(
                f"config {module_name(module)} is not in the registration table"
            )

        active = _ACTIVE_PARSE.get()
        if active is not None and active.attempt.loader is self:
            config = await active.attempt.dependency(active.module, module)
        else:
            loaded = await self._flight.run(self._load_all)
            config = loaded[module]

        if not isinstance(config, module):
            raise TypeMismatchError(f"{module_name(module)}.parse() returned {type(config).__name__}")
        return config

    async def load_all(self) -> LoadedConfigs:
        """Return the whole committed mapping, loading it on first use."""

        return await self._flight.run(self._load_all)

    async def _load_all(self) -> LoadedConfigs:
        logger.debug(
            "start loading configs",
            extra={"modules": [module_name(module) for module in self._modules]},
        )

        if self._unreadable_reason is not None:
            logger.error("Error loading %s: %s", CONFIG_FILE_NAME, self._unreadable_reason)
            self._backup_path = archive_file(self.config_path)
            if self._backup_path is not None:
                logger.warning(
                    "Generating new config file. The old file is saved to %s.", self._backup_path
                )

        try:
            loaded = await self._parse_all(self._parser)
        except ConfigException as exc:
            if self._parser.is_fail_safe():
                raise self._abort(exc) from exc

            logger.error("Error loading %s: %s", CONFIG_FILE_NAME, exc)
            self._backup_path = archive_file(self.config_path)
            logger.warning(
                "Regenerating new config file. The old file is saved to %s.", self._backup_path
            )
            self._parser = Parser(ConfigDocument.fresh())
            self._regenerated = True
            try:
                loaded = await self._parse_all(self._parser)
            except ConfigException as retry_exc:
                raise self._abort(retry_exc) from retry_exc

        persisted = self._persist_if_needed()
        document = self._parser.document
        self._report = LoadReport(
            regenerated=self._regenerated,
            fail_safe=document.fail_safe,
            persisted=persisted,
            backup_path=self._backup_path,
            repairs=document.repairs,
        )
        self._loaded = MappingProxyType(dict(loaded))
        return self._loaded

    async def _parse_all(self, parser: Parser) -> dict[type, object]:
        attempt = _Attempt(loader=self, parser=parser)
        for module in self._modules:
            attempt.tasks[module] = asyncio.create_task(
                self._parse_one(attempt, module),
                name=f"capital-config:{module.__qualname__}",
            )

        result = await join_all(attempt.tasks)
        if result.ok:
            return result.values

        errors = list(result.errors.values())
        for error in errors:
            if not isinstance(error, ConfigException):
                raise error
        raise errors[0]

    async def _parse_one(self, attempt: _Attempt, module: type) -> object:
        _ACTIVE_PARSE.set(_ActiveParse(attempt=attempt, module=module))
        parse = getattr(module, "parse", None)
        if parse is None:
            raise RegistrationError(f"{module_name(module)} has no parse() entry point")
        return await parse(attempt.parser, self._registry)

    def _persist_if_needed(self) -> bool:
        document = self._parser.document
        if not document.fail_safe:
            for repair in document.repairs:
                logger.warning("Repaired config key %s: %s", repair.key, repair.message)
        if not (document.fail_safe or document.repaired):
            return False

        self._data_dir.mkdir(parents=True, exist_ok=True)
        atomic_write(self.config_path, dump_document(document.snapshot()))
        logger.info("Saved config file %s", self.config_path)
        return True

    def _abort(self, exc: ConfigException) -> ConfigRegenerationError:
        logger.critical("Regenerated config still fails to parse: %s", exc)
        return ConfigRegenerationError(
            f"config cannot be generated from defaults: {exc}. "
            "A module's parse() must accept an empty document."
        )


__all__: Final[list[str]] = [
    "ConfigLoader",
    "LoadPhase",
    "LoadReport",
    "LoadState",
    "LoadedConfigs",
    "dump_document",
    "read_document",
]
