"""Process wiring: the registry, its factories and the config module table."""

from __future__ import annotations

import asyncio
import logging
from typing import Final

from capital.analytics.config import AnalyticsConfig
from capital.config.loader import ConfigLoader, LoadedConfigs
from capital.di.registry import ServiceRegistry
from capital.schema.config import SchemaConfig
from capital.schema.registry import TypeRegistry
from capital.settings import AppSettings
from capital.transfer.config import TransferConfig

logger = logging.getLogger(__name__)

# Closed registration table; the loader parses exactly these modules.
ALL_CONFIGS: Final[tuple[type, ...]] = (SchemaConfig, TransferConfig, AnalyticsConfig)


def _build_loader(registry: ServiceRegistry) -> ConfigLoader:
    return ConfigLoader.from_registry(registry, ALL_CONFIGS)


def bootstrap(settings: AppSettings) -> ServiceRegistry:
    """Create the process registry with settings stored and factories registered."""

    registry = ServiceRegistry()
    registry.store(settings)
    registry.register(TypeRegistry, TypeRegistry.with_builtins)
    registry.register(ConfigLoader, _build_loader, depends_on=(ServiceRegistry,))
    logger.debug("registry bootstrapped", extra={"data_dir": settings.data_dir})
    return registry


async def load_all_configs(registry: ServiceRegistry) -> LoadedConfigs:
    """Request every registered module concurrently and return the committed mapping."""

    loader = registry.get(ConfigLoader)
    configs = await asyncio.gather(*(loader.load_config(module) for module in loader.modules))
    return {module: config for module, config in zip(loader.modules, configs, strict=True)}


__all__ = ["ALL_CONFIGS", "bootstrap", "load_all_configs"]
