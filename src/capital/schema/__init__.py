"""Account schemas: which accounts a player has and how they are created."""

from capital.schema.base import InvalidConfigError, Schema, Variable, VariableError
from capital.schema.basic import BasicSchema
from capital.schema.config import SchemaConfig
from capital.schema.currency import CurrencySchema
from capital.schema.registry import DEFAULT_SCHEMA_TYPE, TypeRegistry
from capital.schema.setup import (
    BalanceRange,
    InitialAccount,
    InitialSetup,
    MigrationSetup,
)

__all__ = [
    "DEFAULT_SCHEMA_TYPE",
    "BalanceRange",
    "BasicSchema",
    "CurrencySchema",
    "InitialAccount",
    "InitialSetup",
    "InvalidConfigError",
    "MigrationSetup",
    "Schema",
    "SchemaConfig",
    "TypeRegistry",
    "Variable",
    "VariableError",
]
