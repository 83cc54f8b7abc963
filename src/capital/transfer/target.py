"""Source and destination of a transfer command."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING

from capital.entities import CommandSender, Player
from capital.labels import AccountLabels, LabelSelector, OracleNames
from capital.schema.base import InvalidConfigError, Schema

if TYPE_CHECKING:
    from capital.config.parser import Parser

# One repair per overridable schema key, plus a final retry.
_MAX_OVERRIDE_REPAIRS = 4


class TargetKind(enum.StrEnum):
    SYSTEM = "system"
    SENDER = "sender"
    RECIPIENT = "recipient"


@dataclass(frozen=True, slots=True)
class AccountTarget:
    kind: TargetKind
    schema: Schema

    @classmethod
    def parse(cls, parser: Parser, schema: Schema, default: TargetKind = TargetKind.SYSTEM) -> AccountTarget:
        for _ in range(_MAX_OVERRIDE_REPAIRS):
            try:
                specialized = schema.clone_with_config(parser)
                break
            except InvalidConfigError as exc:
                parser.set_value(exc.key, exc.fallback, exc.reason)
        else:
            specialized = schema.clone_with_config(None)

        raw = parser.expect_string(
            "of",
            default.value,
            'Can be "system", "sender", or "recipient".\n'
            'If "sender" is used, this command will only be usable by\n'
            "players (not the console).",
        )
        try:
            kind = TargetKind(raw)
        except ValueError:
            kind = TargetKind(
                parser.fail_safe(
                    default.value,
                    f'Expected key "of" to be "system", "sender", or "recipient", got "{raw}".',
                    key="of",
                )
            )
        return cls(kind=kind, schema=specialized)

    def new_schema(self) -> Schema:
        """Fresh schema for one invocation; its variables are supplied per request."""
        return self.schema.clone_with_config(None)

    def get_selector(
        self,
        sender: CommandSender,
        recipient: Player,
        schema: Schema | None = None,
    ) -> LabelSelector | None:
        schema = schema if schema is not None else self.schema
        if self.kind is TargetKind.SYSTEM:
            return LabelSelector({AccountLabels.ORACLE: OracleNames.TRANSFER})
        if self.kind is TargetKind.SENDER:
            if not isinstance(sender, Player):
                return None
            return schema.get_selector(sender)
        return schema.get_selector(recipient)


__all__ = ["AccountTarget", "TargetKind"]
