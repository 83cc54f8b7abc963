"""One account per player, identified by the player's UUID."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from capital.entities import Player
from capital.labels import AccountLabels, LabelSelector, LabelSet
from capital.schema.base import InvalidConfigError, Schema, Variable
from capital.schema.setup import (
    BalanceRange,
    InitialAccount,
    InitialSetup,
    MigrationSetup,
    parse_balance_range,
    parse_migration,
)

if TYPE_CHECKING:
    from typing import Self

    from capital.config.parser import Parser


class BasicSchema(Schema):
    """Every player has exactly one account. There are no runtime variables."""

    def __init__(self, balance: BalanceRange, migration_source: str, migration_multiplier: float) -> None:
        self._balance = balance
        self._migration_source = migration_source
        self._migration_multiplier = migration_multiplier

    def __repr__(self) -> str:
        return f"BasicSchema(balance={self._balance!r}, migration={self._migration_source!r})"

    @property
    def balance(self) -> BalanceRange:
        return self._balance

    @classmethod
    def build(cls, global_config: Parser) -> Self:
        balance = parse_balance_range(global_config)
        source, multiplier = parse_migration(global_config)
        return cls(balance, source, multiplier)

    @classmethod
    def describe(cls) -> str:
        return "Every player has one account. Balances are limited by the values below."

    def clone_with_config(self, specific_config: Parser | None) -> BasicSchema:
        balance = self._balance
        if specific_config is not None:
            initial = _override(specific_config, "default-balance", balance.default)
            minimum = _override(specific_config, "min-balance", balance.minimum)
            maximum = _override(specific_config, "max-balance", balance.maximum)
            if minimum > maximum:
                raise InvalidConfigError(
                    f'"max-balance" ({maximum}) must not be less than "min-balance" ({minimum})',
                    key="max-balance",
                    fallback=minimum,
                )
            if not minimum <= initial <= maximum:
                raise InvalidConfigError(
                    f'"default-balance" ({initial}) must be between {minimum} and {maximum}',
                    key="default-balance",
                    fallback=min(max(initial, minimum), maximum),
                )
            balance = BalanceRange(initial, minimum, maximum)
        return BasicSchema(balance, self._migration_source, self._migration_multiplier)

    def _variables(self) -> Sequence[Variable[Any]]:
        return ()

    def _selector(self, player: Player) -> LabelSelector:
        return LabelSelector({AccountLabels.PLAYER_UUID: str(player.uuid)})

    def _overwrite_labels(self, player: Player) -> LabelSet:
        return LabelSet(self._balance.overwrite_labels())

    def _migration_setup(self, player: Player) -> MigrationSetup:
        return MigrationSetup(
            source=self._migration_source,
            multiplier=self._migration_multiplier,
            labels=LabelSet({AccountLabels.MIGRATION_SOURCE: self._migration_source}),
        )

    def _initial_setup(self, player: Player) -> InitialSetup:
        labels = {
            AccountLabels.PLAYER_UUID: str(player.uuid),
            AccountLabels.PLAYER_NAME: player.name,
            **self._balance.overwrite_labels(),
        }
        return InitialSetup(accounts=(InitialAccount(self._balance.default, LabelSet(labels)),))


def _override(parser: Parser, key: str, inherited: int) -> int:
    # Only keys present at the use site override the global value.
    if not parser.has(key):
        return inherited
    return parser.expect_int(key, inherited)


__all__ = ["BasicSchema"]
