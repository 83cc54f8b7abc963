"""Player-facing message templates of a transfer command."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from capital.labels import render_template

if TYPE_CHECKING:
    from typing import Self

    from capital.config.parser import Parser

# key -> (default template, documentation)
_TEMPLATES: Final[dict[str, tuple[str, str]]] = {
    "notify-sender-success": (
        "You have sent ${sent_amount} to {recipient}. You now have ${src_balance} left.",
        "Sent to the command sender after a successful transfer.",
    ),
    "notify-recipient-success": (
        "You have received ${received_amount} from {sender}. You now have ${dest_balance}.",
        "Sent to the recipient after a successful transfer.",
    ),
    "no-source-accounts": (
        "There are no accounts to send money from.",
        "Sent when no account matches the source of the transfer.",
    ),
    "no-destination-accounts": (
        "There are no accounts to send money to.",
        "Sent when no account matches the destination of the transfer.",
    ),
    "underflow": (
        "You do not have ${sent_amount}.",
        "Sent when the source account would go below its minimum balance.",
    ),
    "overflow": (
        "The accounts of {recipient} are full. They cannot fit in ${received_amount} more.",
        "Sent when the destination account would go above its maximum balance.",
    ),
    "internal-error": (
        "An internal error occurred. Please try again.",
        "Sent when the transfer fails for an unexpected reason.",
    ),
}


@dataclass(frozen=True, slots=True)
class Messages:
    notify_sender_success: str
    notify_recipient_success: str
    no_source_accounts: str
    no_destination_accounts: str
    underflow: str
    overflow: str
    internal_error: str

    @classmethod
    def parse(cls, parser: Parser) -> Self:
        values = {
            key.replace("-", "_"): parser.expect_string(key, default, doc)
            for key, (default, doc) in _TEMPLATES.items()
        }
        return cls(**values)

    def render(self, key: str, values: Mapping[str, object]) -> str:
        """Render the template named by its config key (``notify-sender-success``, ...)."""

        if key not in _TEMPLATES:
            raise KeyError(f"unknown message {key!r}")
        template: str = getattr(self, key.replace("-", "_"))
        return render_template(template, values)


__all__ = ["Messages"]
