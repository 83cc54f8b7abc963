"""Unit tests for transfer command parsing and message templates."""

from __future__ import annotations

import pytest

from capital.config.document import ConfigDocument
from capital.config.parser import Parser
from capital.schema.basic import BasicSchema
from capital.transfer.messages import Messages
from capital.transfer.methods import (
    DEFAULT_COMMANDS,
    FALLBACK_COMMAND,
    build_command,
    parse_label_set,
)
from capital.transfer.target import TargetKind


def _parser(data: dict[str, object] | None = None) -> Parser:
    return Parser(ConfigDocument(data or {}))


@pytest.fixture
def schema() -> BasicSchema:
    return BasicSchema.build(_parser())


def test_default_pay_command(schema: BasicSchema) -> None:
    parser = _parser()

    method = build_command(parser, schema, DEFAULT_COMMANDS["pay"])

    assert method.command == "pay"
    assert method.permission == "capital.transfer.pay"
    assert method.default_op is False
    assert method.src.kind is TargetKind.SENDER
    assert method.dest.kind is TargetKind.RECIPIENT
    assert (method.rate, method.minimum_amount, method.maximum_amount) == (1.0, 0, 10_000)
    assert dict(method.transaction_labels.entries) == {"capital/payment": "", "capital/payer": "{sender}"}
    written = parser.get_full_config()
    assert written["src"]["of"] == "sender"
    assert "notify-sender-success" in written["messages"]


@pytest.mark.parametrize(
    ("name", "src", "dest", "op"),
    [
        ("takemoney", TargetKind.RECIPIENT, TargetKind.SYSTEM, True),
        ("addmoney", TargetKind.SYSTEM, TargetKind.RECIPIENT, True),
    ],
)
def test_operator_commands(schema: BasicSchema, name: str, src: TargetKind, dest: TargetKind, op: bool) -> None:
    method = build_command(_parser(), schema, DEFAULT_COMMANDS[name])

    assert method.command == name
    assert (method.src.kind, method.dest.kind, method.default_op) == (src, dest, op)


def test_command_with_spaces_is_truncated(schema: BasicSchema) -> None:
    parser = _parser({"command": "buy money", "permission": "shop.buy"})

    method = build_command(parser, schema, DEFAULT_COMMANDS["pay"])

    assert method.command == "buy"
    assert method.permission == "shop.buy"
    assert parser.get_full_config()["command"] == "buy"
    assert 'key "command"' in parser.document.repairs[0].message


@pytest.mark.parametrize("raw", ["", " leading"])
def test_unusable_command_falls_back(schema: BasicSchema, raw: str) -> None:
    parser = _parser({"command": raw})

    assert build_command(parser, schema).command == FALLBACK_COMMAND
    assert parser.get_full_config()["command"] == FALLBACK_COMMAND


def test_numeric_limits_are_repaired(schema: BasicSchema) -> None:
    parser = _parser({"rate": 0, "minimum-amount": -3, "maximum-amount": -10})

    method = build_command(parser, schema)

    assert method.rate == 1.0
    assert method.minimum_amount == 0
    assert method.maximum_amount == 0
    config = parser.get_full_config()
    assert (config["rate"], config["minimum-amount"], config["maximum-amount"]) == (1.0, 0, 0)


def test_custom_command_without_defaults_gets_generic_values(schema: BasicSchema) -> None:
    method = build_command(_parser({"command": "gift"}), schema)

    assert method.command == "gift"
    assert method.default_op is True
    assert method.src.kind is TargetKind.SENDER
    assert method.dest.kind is TargetKind.RECIPIENT
    assert len(method.transaction_labels.entries) == 0


def test_label_set_keeps_configured_entries() -> None:
    parser = _parser({"shop": "{sender}", "tag": 5})

    labels = parse_label_set(parser, {"ignored": "x"})

    assert dict(labels.entries) == {"shop": "{sender}", "tag": "5"}
    assert dict(labels.render({"sender": "Sam"}).entries) == {"shop": "Sam", "tag": "5"}


def test_empty_label_set_is_filled_with_defaults() -> None:
    parser = _parser()

    labels = parse_label_set(parser, {"capital/operator": "{sender}"})

    assert dict(labels.entries) == {"capital/operator": "{sender}"}
    assert parser.get_full_config() == {"capital/operator": "{sender}"}


def test_messages_render_known_and_keep_unknown_placeholders() -> None:
    messages = Messages.parse(_parser({"underflow": "Need ${sent_amount} from {sender} {who}"}))

    assert messages.render("underflow", {"sent_amount": 5, "sender": "Sam"}) == "Need $5 from Sam {who}"
    assert messages.render("internal-error", {}) == "An internal error occurred. Please try again."


def test_unknown_message_key_raises() -> None:
    messages = Messages.parse(_parser())
    with pytest.raises(KeyError):
        messages.render("nope", {})
