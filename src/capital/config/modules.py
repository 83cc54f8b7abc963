"""Contract implemented by every config module listed in the registration table."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from typing import Self

    from capital.config.parser import Parser
    from capital.di.registry import ServiceRegistry


@runtime_checkable
class ConfigModule(Protocol):
    """A feature module's typed config.

    ``parse`` must only write into ``parser``: it may run twice in one process
    (once against the loaded document, once against a regenerated one) and
    must succeed against an empty document.
    """

    @classmethod
    async def parse(cls, parser: Parser, registry: ServiceRegistry) -> Self: ...


def module_name(module: type) -> str:
    return f"{module.__module__}.{module.__qualname__}"


__all__ = ["ConfigModule", "module_name"]
