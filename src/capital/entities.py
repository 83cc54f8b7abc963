"""Command senders schemas and transfer targets resolve against."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Player:
    name: str
    uuid: UUID


@dataclass(frozen=True, slots=True)
class Console:
    name: str = "CONSOLE"


CommandSender = Player | Console


__all__ = ["CommandSender", "Console", "Player"]
