"""Transfer commands: who pays, who receives, and what players are told."""

from capital.transfer.config import TransferConfig
from capital.transfer.messages import Messages
from capital.transfer.methods import (
    DEFAULT_COMMANDS,
    CommandMethod,
    DefaultCommand,
    build_command,
    parse_label_set,
)
from capital.transfer.target import AccountTarget, TargetKind

__all__ = [
    "DEFAULT_COMMANDS",
    "AccountTarget",
    "CommandMethod",
    "DefaultCommand",
    "Messages",
    "TargetKind",
    "TransferConfig",
    "build_command",
    "parse_label_set",
]
