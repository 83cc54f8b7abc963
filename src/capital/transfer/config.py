"""Config module holding the transfer commands."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

from capital.config.loader import ConfigLoader
from capital.schema.config import SchemaConfig
from capital.transfer.methods import DEFAULT_COMMANDS, CommandMethod, build_command

if TYPE_CHECKING:
    from typing import Self

    from capital.config.parser import Parser
    from capital.di.registry import ServiceRegistry


@dataclass(frozen=True, slots=True)
class TransferConfig:
    methods: Mapping[str, CommandMethod]

    @classmethod
    async def parse(cls, parser: Parser, registry: ServiceRegistry) -> Self:
        loader = registry.get(ConfigLoader)
        schema = (await loader.load_config(SchemaConfig)).schema

        transfer = parser.enter(
            "transfer",
            "Commands that move money between accounts.",
        )
        methods_parser = transfer.enter(
            "methods",
            "Each entry is one command. Remove an entry to disable that command.\n"
            "If this section is empty, the default commands are generated.",
        )

        names = methods_parser.get_keys()
        if not names:
            methods = {
                name: build_command(methods_parser.enter(name, ""), schema, default)
                for name, default in DEFAULT_COMMANDS.items()
            }
        else:
            methods = {
                name: build_command(methods_parser.enter(name, ""), schema, DEFAULT_COMMANDS.get(name))
                for name in names
            }
        return cls(methods=MappingProxyType(methods))

    def by_command(self, command: str) -> CommandMethod | None:
        for method in self.methods.values():
            if method.command == command:
                return method
        return None


__all__ = ["TransferConfig"]
