"""Closed table of schema variants, keyed by the name used in ``schema.type``."""

from __future__ import annotations

from typing import Final

from capital.schema.base import Schema
from capital.schema.basic import BasicSchema
from capital.schema.currency import CurrencySchema

DEFAULT_SCHEMA_TYPE: Final[str] = "basic"


class TypeRegistry:
    def __init__(self) -> None:
        self._types: dict[str, type[Schema]] = {}

    @classmethod
    def with_builtins(cls) -> TypeRegistry:
        registry = cls()
        registry.register("basic", BasicSchema)
        registry.register("currency", CurrencySchema)
        return registry

    def register(self, name: str, schema_type: type[Schema]) -> None:
        if not name or name != name.strip():
            raise ValueError(f"invalid schema type name {name!r}")
        if not (isinstance(schema_type, type) and issubclass(schema_type, Schema)):
            raise ValueError(f"{schema_type!r} is not a Schema subclass")
        if name in self._types:
            raise ValueError(f"schema type {name!r} is already registered")
        self._types[name] = schema_type

    def get(self, name: str) -> type[Schema] | None:
        return self._types.get(name)

    def names(self) -> tuple[str, ...]:
        return tuple(self._types)

    def items(self) -> tuple[tuple[str, type[Schema]], ...]:
        return tuple(self._types.items())

    def __contains__(self, name: object) -> bool:
        return name in self._types


__all__ = ["DEFAULT_SCHEMA_TYPE", "TypeRegistry"]
