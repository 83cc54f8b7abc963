"""Account labels, label sets and the selectors schemas hand out."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Final


class AccountLabels:
    """Well-known label names on accounts."""

    PLAYER_UUID: Final[str] = "capital/playerUuid"
    PLAYER_NAME: Final[str] = "capital/playerName"
    CURRENCY: Final[str] = "capital/currency"
    VALUE_MIN: Final[str] = "capital/valueMin"
    VALUE_MAX: Final[str] = "capital/valueMax"
    ORACLE: Final[str] = "capital/oracle"
    MIGRATION_SOURCE: Final[str] = "capital/migrationSource"


class OracleNames:
    """Names of system-owned accounts."""

    TRANSFER: Final[str] = "transfer"


def _frozen(entries: Mapping[str, str]) -> Mapping[str, str]:
    for key, value in entries.items():
        if not isinstance(key, str) or not isinstance(value, str):
            raise TypeError("label names and values must be strings")
    return MappingProxyType(dict(entries))


@dataclass(frozen=True, slots=True)
class LabelSet:
    """Concrete labels to write onto an account or transaction."""

    entries: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", _frozen(self.entries))

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, name: str) -> str | None:
        return self.entries.get(name)


@dataclass(frozen=True, slots=True)
class LabelSelector:
    """Matches accounts by label.

    An empty expected value matches any account that carries the label at all.
    """

    entries: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", _frozen(self.entries))

    def matches(self, labels: Mapping[str, str]) -> bool:
        for name, expected in self.entries.items():
            if name not in labels:
                return False
            if expected and labels[name] != expected:
                return False
        return True


class _KeepUnknown(dict[str, str]):
    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


def render_template(template: str, values: Mapping[str, object]) -> str:
    """Substitute ``{name}`` placeholders; unknown placeholders are left as-is."""

    context = _KeepUnknown({key: str(value) for key, value in values.items()})
    try:
        return template.format_map(context)
    except (ValueError, IndexError, AttributeError):
        # Unbalanced braces or positional/attribute fields: the template is literal text.
        return template


@dataclass(frozen=True, slots=True)
class ParameterizedLabelSet:
    """Label values that may reference ``{sender}`` and ``{recipient}``."""

    entries: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", _frozen(self.entries))

    def render(self, context: Mapping[str, object]) -> LabelSet:
        return LabelSet({name: render_template(value, context) for name, value in self.entries.items()})


__all__ = [
    "AccountLabels",
    "LabelSelector",
    "LabelSet",
    "OracleNames",
    "ParameterizedLabelSet",
    "render_template",
]
