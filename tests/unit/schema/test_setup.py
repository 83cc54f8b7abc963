from __future__ import annotations

from capital.config.document import ConfigDocument
from capital.config.parser import Parser
from capital.labels import AccountLabels, LabelSet
from capital.schema.setup import (
    BalanceRange,
    MigrationSetup,
    parse_balance_range,
    parse_migration,
)


def _parser(data: dict[str, object] | None = None) -> Parser:
    return Parser(ConfigDocument(data or {}))


def test_balance_range_defaults_are_written() -> None:
    parser = _parser()

    assert parse_balance_range(parser) == BalanceRange(100, 0, 100_000_000)
    assert parser.get_full_config()["max-balance"] == 100_000_000


def test_inverted_range_is_repaired() -> None:
    parser = _parser({"default-balance": 50, "min-balance": 500, "max-balance": 10})

    balance = parse_balance_range(parser)

    assert balance == BalanceRange(500, 500, 100_000_000)
    config = parser.get_full_config()
    assert config["max-balance"] == 100_000_000
    assert config["default-balance"] == 500
    assert [repair.key for repair in parser.document.repairs] == ["max-balance", "default-balance"]


def test_default_balance_is_clamped_into_range() -> None:
    parser = _parser({"default-balance": 900, "min-balance": 0, "max-balance": 300})

    assert parse_balance_range(parser).default == 300


def test_overwrite_labels_carry_the_limits() -> None:
    assert BalanceRange(1, 2, 3).overwrite_labels() == {
        AccountLabels.VALUE_MIN: "2",
        AccountLabels.VALUE_MAX: "3",
    }


def test_unknown_migration_source_falls_back_to_none() -> None:
    parser = _parser({"migration": {"source": "essentials", "multiplier": -2}})

    assert parse_migration(parser) == ("none", 1.0)
    assert parser.get_full_config()["migration"]["source"] == "none"
    assert parser.get_full_config()["migration"]["multiplier"] == 1.0


def test_known_migration_source_is_kept() -> None:
    parser = _parser({"migration": {"source": "economyapi", "multiplier": 0.5}})

    assert parse_migration(parser) == ("economyapi", 0.5)
    assert not parser.document.repaired


def test_disabled_migration_is_still_a_setup() -> None:
    setup = MigrationSetup(source="none", multiplier=1.0, labels=LabelSet())
    assert not setup.enabled
    assert MigrationSetup("economyapi", 1.0, LabelSet()).enabled
