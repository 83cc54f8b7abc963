"""Singleton registry used to wire modules together."""

from capital.di.registry import DependencyError, ServiceRegistry, StoreEvent, StoreObserver

__all__ = [
    "DependencyError",
    "ServiceRegistry",
    "StoreEvent",
    "StoreObserver",
]
