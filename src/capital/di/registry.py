"""
capital — process-wide singleton registry

File: src/capital/di/registry.py

Purpose
- Store one instance per service type and build missing services from explicitly
  registered factories.

Functional requirements
- ``store`` records an instance under its own type and notifies store observers.
- ``fetch`` never constructs and never blocks.
- Factories list their dependencies as an ordered tuple of service types;
  resolution is a table lookup, never signature introspection.
- Unknown types and dependency cycles raise ``DependencyError``.

Constraints
- A store observer must not call ``store`` for the same type while it is being
  notified; the outcome of such a re-entrant overwrite is undefined.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar, cast

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class DependencyError(LookupError):
    """Raised when a service type cannot be resolved from the registry."""


@dataclass(frozen=True, slots=True)
class StoreEvent:
    """Delivered to store observers each time an instance is stored."""

    registry: ServiceRegistry
    service_type: type
    instance: object
    replaced: bool


StoreObserver = Callable[[StoreEvent], object]


@dataclass(frozen=True, slots=True)
class _Factory:
    service_type: type
    build: Callable[..., object]
    depends_on: tuple[type, ...]


class ServiceRegistry:
    """Maps service types to their singleton instances.

    The registry stores itself on construction so factories can depend on it.
    """

    def __init__(self) -> None:
        self._storage: dict[type, object] = {}
        self._factories: dict[type, _Factory] = {}
        self._observers: dict[int, StoreObserver] = {}
        self._next_token = 1
        self._resolving: list[type] = []
        self.store(self)

    def register(
        self,
        service_type: type[T],
        factory: Callable[..., T],
        *,
        depends_on: Sequence[type] = (),
    ) -> None:
        """Register ``factory`` as the way to build ``service_type``.

        ``factory`` is called with one positional argument per entry of
        ``depends_on``, in order.
        """

        if not callable(factory):
            raise ValueError("factory must be callable")
        if service_type in self._factories:
            raise ValueError(f"a factory for {_type_name(service_type)} is already registered")
        self._factories[service_type] = _Factory(
            service_type=service_type,
            build=factory,
            depends_on=tuple(depends_on),
        )

    def is_registered(self, service_type: type) -> bool:
        return service_type in self._factories or service_type in self._storage

    def store(self, instance: object) -> None:
        """Store ``instance`` under its own type and notify observers."""

        service_type = type(instance)
        replaced = service_type in self._storage
        self._storage[service_type] = instance
        logger.debug("stored singleton %s (replaced=%s)", _type_name(service_type), replaced)

        event = StoreEvent(
            registry=self,
            service_type=service_type,
            instance=instance,
            replaced=replaced,
        )
        for token, observer in tuple(self._observers.items()):
            try:
                observer(event)
            except Exception:  # noqa: BLE001 - observers are isolated.
                logger.exception(
                    "store observer %d failed for %s", token, _type_name(service_type)
                )

    def fetch(self, service_type: type[T]) -> T | None:
        """Return the stored instance for ``service_type`` or ``None``."""

        instance = self._storage.get(service_type)
        if instance is None:
            return None
        return cast("T", instance)

    def get(self, service_type: type[T]) -> T:
        """Return the stored instance, building and storing it on first request."""

        existing = self.fetch(service_type)
        if existing is not None:
            return existing

        factory = self._factories.get(service_type)
        if factory is None:
            raise DependencyError(f"{_type_name(service_type)} is not a registered singleton type")

        if service_type in self._resolving:
            chain = " -> ".join(_type_name(item) for item in (*self._resolving, service_type))
            raise DependencyError(f"dependency cycle: {chain}")

        self._resolving.append(service_type)
        try:
            args = self.resolve_dependencies(factory.depends_on)
            instance = factory.build(*args)
        finally:
            self._resolving.pop()

        if not isinstance(instance, service_type):
            raise DependencyError(
                f"factory for {_type_name(service_type)} returned {type(instance).__name__}"
            )
        # A factory may have stored the instance itself.
        if self.fetch(service_type) is not instance:
            self.store(instance)
        return instance

    def resolve_dependencies(self, depends_on: Sequence[type]) -> list[Any]:
        """Return one instance per type in ``depends_on``, in order."""

        return [self.get(service_type) for service_type in depends_on]

    def call(self, fn: Callable[..., R], depends_on: Sequence[type] = ()) -> R:
        """Call ``fn`` with its dependencies resolved from this registry."""

        return fn(*self.resolve_dependencies(depends_on))

    def subscribe(self, observer: StoreObserver) -> int:
        """Register a store observer. Returns a token for :meth:`unsubscribe`."""

        if not callable(observer):
            raise ValueError("observer must be callable")
        token = self._next_token
        self._next_token += 1
        self._observers[token] = observer
        return token

    def unsubscribe(self, token: int) -> bool:
        """Remove a store observer. Returns ``True`` when the token existed."""

        return self._observers.pop(token, None) is not None


def _type_name(service_type: type) -> str:
    return f"{service_type.__module__}.{service_type.__qualname__}"


__all__ = [
    "DependencyError",
    "ServiceRegistry",
    "StoreEvent",
    "StoreObserver",
]
