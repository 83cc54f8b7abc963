"""Account creation and migration settings shared by the schema variants."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from capital.labels import AccountLabels, LabelSet

if TYPE_CHECKING:
    from capital.config.parser import Parser

MIGRATION_NONE: Final[str] = "none"
MIGRATION_ECONOMYAPI: Final[str] = "economyapi"
MIGRATION_SOURCES: Final[tuple[str, ...]] = (MIGRATION_NONE, MIGRATION_ECONOMYAPI)

DEFAULT_BALANCE: Final[int] = 100
DEFAULT_MIN_BALANCE: Final[int] = 0
DEFAULT_MAX_BALANCE: Final[int] = 100_000_000


@dataclass(frozen=True, slots=True)
class BalanceRange:
    default: int
    minimum: int
    maximum: int

    def overwrite_labels(self) -> dict[str, str]:
        return {
            AccountLabels.VALUE_MIN: str(self.minimum),
            AccountLabels.VALUE_MAX: str(self.maximum),
        }


@dataclass(frozen=True, slots=True)
class MigrationSetup:
    """Where to import balances from when a player's account is first created.

    ``source == "none"`` is a valid, disabled setup.
    """

    source: str
    multiplier: float
    labels: LabelSet

    @property
    def enabled(self) -> bool:
        return self.source != MIGRATION_NONE


@dataclass(frozen=True, slots=True)
class InitialAccount:
    balance: int
    labels: LabelSet


@dataclass(frozen=True, slots=True)
class InitialSetup:
    accounts: tuple[InitialAccount, ...]


def parse_balance_range(parser: Parser, default: BalanceRange | None = None) -> BalanceRange:
    """Read ``default-balance``/``min-balance``/``max-balance`` and repair inconsistent ranges."""

    default = default or BalanceRange(DEFAULT_BALANCE, DEFAULT_MIN_BALANCE, DEFAULT_MAX_BALANCE)
    initial = parser.expect_int(
        "default-balance",
        default.default,
        "The amount of money in new accounts.",
    )
    minimum = parser.expect_int(
        "min-balance",
        default.minimum,
        "The minimum amount of money in an account.\n"
        "Transactions that would take the balance below this value fail.",
    )
    maximum = parser.expect_int(
        "max-balance",
        default.maximum,
        "The maximum amount of money in an account.\n"
        "Transactions that would take the balance above this value fail.",
    )
    if minimum > maximum:
        maximum = parser.set_value(
            "max-balance",
            max(minimum, default.maximum),
            f'"max-balance" ({maximum}) must not be less than "min-balance" ({minimum}).',
        )
    if not minimum <= initial <= maximum:
        initial = parser.set_value(
            "default-balance",
            min(max(initial, minimum), maximum),
            f'"default-balance" ({initial}) must be between "min-balance" and "max-balance".',
        )
    return BalanceRange(initial, minimum, maximum)


def parse_migration(parser: Parser) -> tuple[str, float]:
    """Read the ``migration`` block: source plugin and balance multiplier."""

    migration = parser.enter(
        "migration",
        "Import balances from another economy plugin the first time a player joins.",
    )
    source = migration.expect_string(
        "source",
        MIGRATION_NONE,
        f'Where to import balances from. One of: {", ".join(MIGRATION_SOURCES)}.',
    )
    if source not in MIGRATION_SOURCES:
        source = migration.fail_safe(
            MIGRATION_NONE,
            f'Expected key "source" to be one of {", ".join(MIGRATION_SOURCES)}, got "{source}".',
            key="source",
        )
    multiplier = migration.expect_number(
        "multiplier",
        1.0,
        "Imported balances are multiplied by this number.",
    )
    if multiplier <= 0:
        multiplier = migration.set_value("multiplier", 1.0, '"multiplier" must be positive.')
    return source, multiplier


__all__ = [
    "MIGRATION_ECONOMYAPI",
    "MIGRATION_NONE",
    "MIGRATION_SOURCES",
    "BalanceRange",
    "InitialAccount",
    "InitialSetup",
    "MigrationSetup",
    "parse_balance_range",
    "parse_migration",
]
