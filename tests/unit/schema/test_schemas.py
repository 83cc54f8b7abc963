"""Unit tests for the schema variants and their variable slots."""

from __future__ import annotations

from uuid import UUID

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from capital.config.document import ConfigDocument
from capital.config.parser import Parser
from capital.entities import Player
from capital.labels import AccountLabels
from capital.schema.base import InvalidConfigError, Schema, Variable, VariableError
from capital.schema.basic import BasicSchema
from capital.schema.currency import CurrencySchema
from capital.schema.registry import TypeRegistry
from capital.schema.setup import BalanceRange

ALEX = Player("Alex", UUID("00000000-0000-0000-0000-00000000a1e7"))


def _parser(data: dict[str, object] | None = None) -> Parser:
    return Parser(ConfigDocument(data or {}))


def _currency_schema() -> CurrencySchema:
    return CurrencySchema.build(
        _parser(
            {
                "currencies": {
                    "coins": {"default-balance": 10, "min-balance": 0, "max-balance": 1000},
                    "gems": {"default-balance": 0, "min-balance": 0, "max-balance": 50},
                },
                "default-currency": "coins",
                "migration": {"source": "economyapi", "multiplier": 2.0},
            }
        )
    )


def _queries(schema: Schema) -> list[object]:
    return [
        schema.get_selector(ALEX),
        schema.get_overwrite_labels(ALEX),
        schema.get_migration_setup(ALEX),
        schema.get_initial_setup(ALEX),
    ]


def test_basic_schema_is_complete_and_selects_by_uuid() -> None:
    schema = BasicSchema.build(_parser())

    assert schema.is_complete()
    assert schema.get_required_variables() == []
    assert schema.get_optional_variables() == []

    selector = schema.get_selector(ALEX)
    assert selector is not None
    assert dict(selector.entries) == {AccountLabels.PLAYER_UUID: str(ALEX.uuid)}

    initial = schema.get_initial_setup(ALEX)
    assert initial is not None
    (account,) = initial.accounts
    assert account.balance == 100
    assert account.labels.get(AccountLabels.PLAYER_NAME) == "Alex"

    migration = schema.get_migration_setup(ALEX)
    assert migration is not None and not migration.enabled


def test_basic_clone_overrides_only_present_keys() -> None:
    schema = BasicSchema.build(_parser({"max-balance": 500}))

    clone = schema.clone_with_config(_parser({"default-balance": 7}))

    assert clone is not schema
    assert clone.balance == BalanceRange(7, 0, 500)
    assert schema.balance == BalanceRange(100, 0, 500)


def test_basic_clone_without_config_is_a_copy() -> None:
    schema = BasicSchema.build(_parser())
    clone = schema.clone_with_config(None)

    assert clone is not schema
    assert clone.balance == schema.balance


def test_basic_clone_rejects_inverted_range() -> None:
    schema = BasicSchema.build(_parser())

    with pytest.raises(InvalidConfigError) as excinfo:
        schema.clone_with_config(_parser({"min-balance": 10, "max-balance": 5}))
    assert excinfo.value.key == "max-balance"
    assert excinfo.value.fallback == 10


def test_basic_clone_rejects_default_outside_range() -> None:
    schema = BasicSchema.build(_parser())

    with pytest.raises(InvalidConfigError) as excinfo:
        schema.clone_with_config(_parser({"default-balance": -5}))
    assert excinfo.value.key == "default-balance"
    assert excinfo.value.fallback == 0


def test_currency_schema_defaults_to_money() -> None:
    parser = _parser()
    schema = CurrencySchema.build(parser)

    assert schema.currencies == ("money",)
    assert schema.default_currency == "money"
    assert "money" in parser.get_full_config()["currencies"]


def test_unpinned_currency_schema_requires_a_currency() -> None:
    schema = _currency_schema().clone_with_config(None)

    assert not schema.is_complete()
    assert [variable.name for variable in schema.get_required_variables()] == ["currency"]
    assert _queries(schema) == [None, None, None, None]


def test_supplying_the_currency_completes_the_schema() -> None:
    schema = _currency_schema().clone_with_config(None)
    (variable,) = schema.get_required_variables()

    variable.process_value("gems")

    assert schema.is_complete()
    assert schema.get_required_variables() == []
    assert [v.name for v in schema.get_optional_variables()] == ["currency"]
    selector = schema.get_selector(ALEX)
    assert selector is not None
    assert selector.entries[AccountLabels.CURRENCY] == "gems"
    overwrite = schema.get_overwrite_labels(ALEX)
    assert overwrite is not None and overwrite.get(AccountLabels.VALUE_MAX) == "50"


def test_variable_rejects_unknown_currency_and_stays_required() -> None:
    schema = _currency_schema().clone_with_config(None)
    (variable,) = schema.get_required_variables()

    with pytest.raises(ValueError, match="unknown currency"):
        variable.process_value("dollars")
    with pytest.raises(ValueError, match="expects str"):
        variable.process_value(3)  # type: ignore[arg-type]

    assert not schema.is_complete()


def test_variable_cannot_be_supplied_twice() -> None:
    schema = _currency_schema().clone_with_config(None)
    (variable,) = schema.get_required_variables()
    variable.process_value("coins")

    with pytest.raises(VariableError):
        variable.process_value("gems")


def test_pinned_currency_needs_no_variable() -> None:
    schema = _currency_schema().clone_with_config(_parser({"currency": "gems"}))

    assert schema.is_complete()
    assert schema.currency == "gems"
    assert [variable.name for variable in schema.get_optional_variables()] == ["currency"]


def test_pinning_an_unknown_currency_is_invalid() -> None:
    with pytest.raises(InvalidConfigError) as excinfo:
        _currency_schema().clone_with_config(_parser({"currency": "dollars"}))
    assert excinfo.value.key == "currency"
    assert excinfo.value.fallback == ""


def test_empty_pin_leaves_the_currency_open() -> None:
    schema = _currency_schema().clone_with_config(_parser({"currency": ""}))
    assert not schema.is_complete()


def test_migration_only_targets_the_default_currency() -> None:
    base = _currency_schema()
    coins = base.clone_with_config(_parser({"currency": "coins"}))
    gems = base.clone_with_config(_parser({"currency": "gems"}))

    coins_migration = coins.get_migration_setup(ALEX)
    gems_migration = gems.get_migration_setup(ALEX)
    assert coins_migration is not None and coins_migration.source == "economyapi"
    assert coins_migration.multiplier == 2.0
    assert gems_migration is not None and not gems_migration.enabled


def test_unknown_default_currency_is_repaired() -> None:
    parser = _parser({"currencies": {"coins": {}}, "default-currency": "gold"})

    schema = CurrencySchema.build(parser)

    assert schema.default_currency == "coins"
    assert parser.get_full_config()["default-currency"] == "coins"


@given(
    pin=st.one_of(st.none(), st.sampled_from(["coins", "gems"])),
    supply=st.lists(st.sampled_from(["coins", "gems", "dollars"]), max_size=3),
)
@settings(max_examples=60, derandomize=True, deadline=None)
def test_queries_answer_exactly_when_complete(pin: str | None, supply: list[str]) -> None:
    config = None if pin is None else _parser({"currency": pin})
    schema = _currency_schema().clone_with_config(config)

    for value in supply:
        for variable in schema.get_required_variables():
            try:
                variable.process_value(value)
            except ValueError:
                pass

    answers = _queries(schema)
    if schema.is_complete():
        assert all(answer is not None for answer in answers)
    else:
        assert all(answer is None for answer in answers)
    assert len(schema.get_required_variables()) + len(schema.get_optional_variables()) == 1


def test_variable_apply_failure_leaves_slot_required() -> None:
    seen: list[int] = []

    def apply(value: int) -> None:
        if value < 0:
            raise ValueError("negative")
        seen.append(value)

    variable = Variable("amount", "An amount", int, apply)
    with pytest.raises(ValueError):
        variable.process_value(-1)
    assert not variable.consumed

    variable.process_value(4)
    assert variable.consumed
    assert seen == [4]


def test_type_registry_holds_builtins_in_order() -> None:
    types = TypeRegistry.with_builtins()

    assert types.names() == ("basic", "currency")
    assert types.get("currency") is CurrencySchema
    assert "basic" in types
    assert types.get("nope") is None


@pytest.mark.parametrize(
    ("name", "schema_type", "message"),
    [
        ("basic", BasicSchema, "already registered"),
        ("", BasicSchema, "invalid schema type name"),
        (" padded", BasicSchema, "invalid schema type name"),
        ("other", dict, "not a Schema subclass"),
    ],
)
def test_type_registry_rejects_bad_registrations(name: str, schema_type: type, message: str) -> None:
    with pytest.raises(ValueError, match=message):
        TypeRegistry.with_builtins().register(name, schema_type)
