"""
capital — in-memory config document

File: src/capital/config/document.py

Purpose
- Own the mutable key-value tree read from ``config.yml`` and the record of every
  repair applied to it during a load pass.

Functional requirements
- Navigating an absent path yields ``MISSING``, never an error.
- Writes create intermediate maps as needed.
- Documentation lives in sibling keys prefixed with ``#``.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final

from capital.constants import DOC_MARKER, FRESH_DOCUMENT_HEADER


class _Missing:
    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Final = _Missing()


@dataclass(frozen=True, slots=True)
class Repair:
    """One default substitution or forced overwrite applied to the document."""

    path: tuple[str, ...]
    message: str

    @property
    def key(self) -> str:
        return ".".join(self.path) if self.path else "<root>"


class ConfigDocument:
    """Single-writer config tree.

    ``fail_safe`` marks a document generated from scratch (no file, an
    unreadable file, or a regenerated pass) rather than loaded from disk.
    """

    __slots__ = ("_repairs", "_root", "fail_safe")

    def __init__(self, data: Mapping[str, Any] | None = None, *, fail_safe: bool = False) -> None:
        self._root: dict[str, Any] = _copy_tree(data or {})
        self._repairs: list[Repair] = []
        self.fail_safe = fail_safe

    @classmethod
    def fresh(cls) -> ConfigDocument:
        """Empty fail-safe document carrying the file header."""

        document = cls({}, fail_safe=True)
        document._root[DOC_MARKER] = FRESH_DOCUMENT_HEADER
        return document

    @property
    def repaired(self) -> bool:
        return bool(self._repairs)

    @property
    def repairs(self) -> tuple[Repair, ...]:
        return tuple(self._repairs)

    def get(self, path: Sequence[str]) -> Any:
        cursor: Any = self._root
        for part in path:
            if not isinstance(cursor, dict) or part not in cursor:
                return MISSING
            cursor = cursor[part]
        return cursor

    def set(self, path: Sequence[str], value: Any) -> None:
        if not path:
            raise ValueError("cannot replace the document root")
        cursor = self._root
        for part in path[:-1]:
            child = cursor.get(part)
            if not isinstance(child, dict):
                child = {}
                cursor[part] = child
            cursor = child
        cursor[path[-1]] = value

    def delete(self, path: Sequence[str]) -> None:
        """Remove the key at ``path`` together with its documentation sibling."""

        if not path:
            raise ValueError("cannot delete the document root")
        parent = self.get(path[:-1])
        if not isinstance(parent, dict):
            return
        parent.pop(path[-1], None)
        if path[-1]:
            # A bare "#" is the section header, not the doc of an empty key.
            parent.pop(DOC_MARKER + path[-1], None)

    def set_doc(self, path: Sequence[str], doc: str) -> None:
        """Attach ``doc`` to the key at ``path`` (stored as ``#<key>`` beside it)."""

        if not path or not doc:
            return
        self.set((*path[:-1], DOC_MARKER + path[-1]), doc)

    def record_repair(self, path: Sequence[str], message: str) -> None:
        self._repairs.append(Repair(path=tuple(path), message=message))

    def snapshot(self) -> dict[str, Any]:
        """Deep copy of the whole tree, documentation keys included."""

        return _copy_tree(self._root)


def _copy_tree(data: Mapping[Any, Any]) -> dict[str, Any]:
    # YAML allows non-string keys; paths are always strings.
    return {str(key): _copy_value(value) for key, value in data.items()}


def _copy_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return _copy_tree(value)
    return copy.deepcopy(value)


__all__ = [
    "MISSING",
    "ConfigDocument",
    "Repair",
]
