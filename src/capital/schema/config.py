"""Config module holding the global account schema."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from capital.schema.base import Schema
from capital.schema.registry import DEFAULT_SCHEMA_TYPE, TypeRegistry

if TYPE_CHECKING:
    from typing import Self

    from capital.config.parser import Parser
    from capital.di.registry import ServiceRegistry


@dataclass(frozen=True, slots=True)
class SchemaConfig:
    type_name: str
    schema: Schema

    @classmethod
    async def parse(cls, parser: Parser, registry: ServiceRegistry) -> Self:
        types = registry.get(TypeRegistry)
        schema_parser = parser.enter(
            "schema",
            "A schema describes which accounts a player has.\n"
            "Other settings (e.g. transfer commands) refer to accounts through the schema.",
        )

        lines = [f"{name}: {variant.describe()}" for name, variant in types.items()]
        type_name = schema_parser.expect_string(
            "type",
            DEFAULT_SCHEMA_TYPE,
            "The type of schema. Possible values:\n" + "\n".join(lines),
        )
        schema_type = types.get(type_name)
        if schema_type is None:
            type_name = schema_parser.fail_safe(
                DEFAULT_SCHEMA_TYPE,
                f'Expected key "type" to be one of {", ".join(types.names())}, got "{type_name}".',
                key="type",
            )
            schema_type = types.get(type_name)
            if schema_type is None:
                raise LookupError(f"default schema type {type_name!r} is not registered")

        variant_parser = schema_parser.enter(type_name, schema_type.describe())
        return cls(type_name=type_name, schema=schema_type.build(variant_parser))


__all__ = ["SchemaConfig"]
