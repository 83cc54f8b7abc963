"""Transfer commands built from config."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from capital.labels import ParameterizedLabelSet
from capital.schema.base import Schema
from capital.transfer.messages import Messages
from capital.transfer.target import AccountTarget, TargetKind

if TYPE_CHECKING:
    from capital.config.parser import Parser

FALLBACK_COMMAND: Final[str] = "transfer-command"
FALLBACK_PERMISSION: Final[str] = "capital.transfer.unspecified"


@dataclass(frozen=True, slots=True)
class DefaultCommand:
    """Values written for a command method that is missing from the document."""

    command: str
    permission: str
    default_op: bool
    src: TargetKind
    dest: TargetKind
    rate: float = 1.0
    minimum_amount: int = 0
    maximum_amount: int = 10_000
    transaction_labels: Mapping[str, str] = field(default_factory=dict)


DEFAULT_COMMANDS: Final[dict[str, DefaultCommand]] = {
    "pay": DefaultCommand(
        command="pay",
        permission="capital.transfer.pay",
        default_op=False,
        src=TargetKind.SENDER,
        dest=TargetKind.RECIPIENT,
        transaction_labels={"capital/payment": "", "capital/payer": "{sender}"},
    ),
    "takemoney": DefaultCommand(
        command="takemoney",
        permission="capital.transfer.takemoney",
        default_op=True,
        src=TargetKind.RECIPIENT,
        dest=TargetKind.SYSTEM,
        maximum_amount=1_000_000,
        transaction_labels={"capital/operator": "{sender}"},
    ),
    "addmoney": DefaultCommand(
        command="addmoney",
        permission="capital.transfer.addmoney",
        default_op=True,
        src=TargetKind.SYSTEM,
        dest=TargetKind.RECIPIENT,
        maximum_amount=1_000_000,
        transaction_labels={"capital/operator": "{sender}"},
    ),
}


@dataclass(frozen=True, slots=True)
class CommandMethod:
    command: str
    permission: str
    default_op: bool
    src: AccountTarget
    dest: AccountTarget
    rate: float
    minimum_amount: int
    maximum_amount: int
    transaction_labels: ParameterizedLabelSet
    messages: Messages


def build_command(parser: Parser, schema: Schema, default: DefaultCommand | None = None) -> CommandMethod:
    command = _single_word(
        parser,
        "command",
        default.command if default else FALLBACK_COMMAND,
        FALLBACK_COMMAND,
        "This is the name of the command that will be run.",
        "The command's name",
    )
    permission = _single_word(
        parser,
        "permission",
        default.permission if default else FALLBACK_PERMISSION,
        FALLBACK_PERMISSION,
        "This is the permission players must have.\nIt will be created for you.",
        "The command's permission",
    )
    default_op = parser.expect_bool(
        "default-op",
        default.default_op if default else True,
        "This requires the user of the command to have op permissions.",
    )

    src = AccountTarget.parse(
        parser.enter("src", 'The "source" to take money from.'),
        schema,
        default.src if default else TargetKind.SENDER,
    )
    dest = AccountTarget.parse(
        parser.enter("dest", 'The "destination" to give money to.'),
        schema,
        default.dest if default else TargetKind.RECIPIENT,
    )

    rate = parser.expect_number(
        "rate",
        default.rate if default else 1.0,
        "The exchange rate, or how much of the original money is sent.\n"
        'When using the "currency" schema, this allows transferring between\n'
        "accounts of different currencies.",
    )
    if rate <= 0:
        rate = parser.set_value("rate", 1.0, 'The exchange rate (key "rate") must be positive.')

    minimum_amount = parser.expect_int(
        "minimum-amount",
        default.minimum_amount if default else 0,
        "The minimum amount of money that can be transferred each time.",
    )
    if minimum_amount < 0:
        minimum_amount = parser.set_value(
            "minimum-amount", 0, 'The minimum amount (key "minimum-amount") must not be negative.'
        )
    maximum_amount = parser.expect_int(
        "maximum-amount",
        default.maximum_amount if default else 10_000,
        "The maximum amount of money that can be transferred each time.",
    )
    if maximum_amount < minimum_amount:
        maximum_amount = parser.set_value(
            "maximum-amount",
            minimum_amount,
            'The maximum amount (key "maximum-amount") must not be less than the minimum amount.',
        )

    transaction_labels = parse_label_set(
        parser.enter(
            "transaction-labels",
            "These are labels to add to the transaction.\n"
            "You can match by these labels to identify\n"
            "how players earn and lose money.\n"
            'Values may contain "{sender}" and "{recipient}".',
        ),
        default.transaction_labels if default else {},
    )
    messages = Messages.parse(parser.enter("messages", "Messages shown to players."))

    return CommandMethod(
        command=command,
        permission=permission,
        default_op=default_op,
        src=src,
        dest=dest,
        rate=rate,
        minimum_amount=minimum_amount,
        maximum_amount=maximum_amount,
        transaction_labels=transaction_labels,
        messages=messages,
    )


def parse_label_set(parser: Parser, default_entries: Mapping[str, str] | None = None) -> ParameterizedLabelSet:
    """Read a free-form label map; an empty map is filled with ``default_entries``."""

    names = parser.get_keys()
    if not names:
        entries = dict(default_entries or {})
        for name, value in entries.items():
            parser.expect_string(name, value)
    else:
        entries = {name: parser.expect_string(name, "") for name in names}
    return ParameterizedLabelSet(entries)


def _single_word(parser: Parser, key: str, default: str, fallback: str, doc: str, what: str) -> str:
    value = parser.expect_string(key, default, doc)
    if value == "":
        return parser.set_value(key, fallback, f'{what} (key "{key}") must not be empty.')
    if " " in value:
        truncated = value[: value.index(" ")]
        return parser.set_value(
            key,
            truncated or fallback,
            f'{what} (key "{key}") must not have spaces.',
        )
    return value


__all__ = [
    "DEFAULT_COMMANDS",
    "FALLBACK_COMMAND",
    "FALLBACK_PERMISSION",
    "CommandMethod",
    "DefaultCommand",
    "build_command",
    "parse_label_set",
]
