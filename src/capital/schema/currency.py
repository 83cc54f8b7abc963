"""One account per player per currency; the currency may be left to runtime."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Final

from capital.entities import Player
from capital.labels import AccountLabels, LabelSelector, LabelSet
from capital.schema.base import InvalidConfigError, Schema, Variable
from capital.schema.setup import (
    MIGRATION_NONE,
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

DEFAULT_CURRENCY: Final[str] = "money"


class CurrencySchema(Schema):
    """Accounts are keyed by player and currency.

    A use site pins the currency with a ``currency`` key. Otherwise the schema
    has one required variable, ``currency``, supplied per request.
    """

    def __init__(
        self,
        currencies: Mapping[str, BalanceRange],
        default_currency: str,
        migration_source: str,
        migration_multiplier: float,
        *,
        currency: str | None = None,
    ) -> None:
        if not currencies:
            raise ValueError("at least one currency is required")
        if default_currency not in currencies:
            raise ValueError(f"default currency {default_currency!r} is not configured")
        if currency is not None and currency not in currencies:
            raise ValueError(f"currency {currency!r} is not configured")
        self._currencies = dict(currencies)
        self._default_currency = default_currency
        self._migration_source = migration_source
        self._migration_multiplier = migration_multiplier
        self._currency = currency
        self._currency_variable: Variable[str] = Variable(
            "currency",
            "The currency of the account",
            str,
            self._set_currency,
            consumed=currency is not None,
        )

    def __repr__(self) -> str:
        return f"CurrencySchema(currencies={list(self._currencies)!r}, currency={self._currency!r})"

    @property
    def currencies(self) -> tuple[str, ...]:
        return tuple(self._currencies)

    @property
    def default_currency(self) -> str:
        return self._default_currency

    @property
    def currency(self) -> str | None:
        return self._currency

    @classmethod
    def build(cls, global_config: Parser) -> Self:
        currencies_parser = global_config.enter(
            "currencies",
            "The currencies players can hold. Each currency has its own balance limits.",
        )
        names = currencies_parser.get_keys()
        if not names:
            names = [DEFAULT_CURRENCY]

        currencies = {
            name: parse_balance_range(currencies_parser.enter(name, f'Settings of the "{name}" currency.'))
            for name in names
        }

        default_currency = global_config.expect_string(
            "default-currency",
            names[0],
            "The currency that migrated balances are imported into.",
        )
        if default_currency not in currencies:
            default_currency = global_config.fail_safe(
                names[0],
                f'"default-currency" must be one of {", ".join(names)}, got "{default_currency}".',
                key="default-currency",
            )

        source, multiplier = parse_migration(global_config)
        return cls(currencies, default_currency, source, multiplier)

    @classmethod
    def describe(cls) -> str:
        return (
            "Players have one account for each currency.\n"
            'Commands choose the currency with a "currency" key, or ask for it when run.'
        )

    def clone_with_config(self, specific_config: Parser | None) -> CurrencySchema:
        currency = self._currency
        if specific_config is not None and specific_config.has("currency"):
            pinned = specific_config.expect_string("currency", "")
            if pinned and pinned not in self._currencies:
                raise InvalidConfigError(
                    f'unknown currency "{pinned}", expected one of {", ".join(self._currencies)}',
                    key="currency",
                    fallback="",
                )
            if pinned:
                currency = pinned
        return CurrencySchema(
            self._currencies,
            self._default_currency,
            self._migration_source,
            self._migration_multiplier,
            currency=currency,
        )

    def _set_currency(self, value: str) -> None:
        if value not in self._currencies:
            raise ValueError(f"unknown currency {value!r}, expected one of {', '.join(self._currencies)}")
        self._currency = value

    def _variables(self) -> Sequence[Variable[Any]]:
        return (self._currency_variable,)

    def _selected(self) -> tuple[str, BalanceRange]:
        if self._currency is None:
            raise RuntimeError("currency has not been supplied")
        return self._currency, self._currencies[self._currency]

    def _selector(self, player: Player) -> LabelSelector:
        name, _ = self._selected()
        return LabelSelector(
            {
                AccountLabels.PLAYER_UUID: str(player.uuid),
                AccountLabels.CURRENCY: name,
            }
        )

    def _overwrite_labels(self, player: Player) -> LabelSet:
        _, balance = self._selected()
        return LabelSet(balance.overwrite_labels())

    def _migration_setup(self, player: Player) -> MigrationSetup:
        name, _ = self._selected()
        # Only the default currency receives imported balances.
        source = self._migration_source if name == self._default_currency else MIGRATION_NONE
        return MigrationSetup(
            source=source,
            multiplier=self._migration_multiplier,
            labels=LabelSet(
                {
                    AccountLabels.MIGRATION_SOURCE: source,
                    AccountLabels.CURRENCY: name,
                }
            ),
        )

    def _initial_setup(self, player: Player) -> InitialSetup:
        name, balance = self._selected()
        labels = {
            AccountLabels.PLAYER_UUID: str(player.uuid),
            AccountLabels.PLAYER_NAME: player.name,
            AccountLabels.CURRENCY: name,
            **balance.overwrite_labels(),
        }
        return InitialSetup(accounts=(InitialAccount(balance.default, LabelSet(labels)),))


__all__ = ["DEFAULT_CURRENCY", "CurrencySchema"]
