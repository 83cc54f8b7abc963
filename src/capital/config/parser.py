"""
capital — self-documenting, self-repairing config reader

File: src/capital/config/parser.py

Purpose
- Give module ``parse`` functions a cursor over one subtree of the config document.

Functional requirements
- ``expect_*`` reads never fail: an absent or malformed value is replaced by the
  default, written back into the document and recorded as a repair.
- Every default written carries its documentation string, so running the same
  parse code against an empty document produces a complete, commented file.
- ``enter`` creates missing subtrees. A scalar where a subtree is expected is a
  structural error in a loaded document (``ConfigException``) and is replaced
  in a fail-safe one.

Non-functional requirements
- Parsers are views: besides the document and their path they only remember
  which child keys they have visited, in order.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

from capital.config.document import MISSING, ConfigDocument
from capital.config.errors import ConfigException
from capital.constants import DOC_MARKER

T = TypeVar("T")

_Coerce = Callable[[Any], Any]


class Parser:
    """Cursor over the subtree of a :class:`ConfigDocument` at ``path``."""

    __slots__ = ("_document", "_path", "_visited")

    def __init__(self, document: ConfigDocument, path: Sequence[str] = ()) -> None:
        self._document = document
        self._path = tuple(path)
        self._visited: list[str] = []

    def __repr__(self) -> str:
        return f"Parser(path={self.dotted_path!r}, fail_safe={self.is_fail_safe()})"

    @property
    def document(self) -> ConfigDocument:
        return self._document

    @property
    def path(self) -> tuple[str, ...]:
        return self._path

    @property
    def dotted_path(self) -> str:
        return ".".join(self._path)

    @property
    def visited_keys(self) -> tuple[str, ...]:
        """Child keys this cursor has read or written, in first-visit order."""
        return tuple(self._visited)

    def is_fail_safe(self) -> bool:
        return self._document.fail_safe

    def get_full_config(self) -> dict[str, Any]:
        """Return a copy of the whole document, documentation keys included."""

        return self._document.snapshot()

    def get_keys(self) -> list[str]:
        """Child key names of this subtree in document order, without ``#`` keys.

        A key with an empty name cannot be addressed; it is removed from the
        document and recorded as a repair.
        """

        node = self._document.get(self._path)
        if not isinstance(node, dict):
            return []
        keys: list[str] = []
        for key in list(node):
            if key.startswith(DOC_MARKER):
                continue
            if not key:
                path = (*self._path, key)
                self._document.delete(path)
                self._document.record_repair(
                    self._path, f'Removed a key with an empty name under "{self.dotted_path or "<root>"}"'
                )
                continue
            keys.append(key)
        return keys

    def has(self, key: str) -> bool:
        return self._document.get(self._child(key)) is not MISSING

    def enter(self, key: str, doc: str = "") -> Parser:
        """Return a parser for the subtree at ``key``, creating it if absent."""

        path = self._child(key)
        node = self._document.get(path)
        if node is MISSING:
            self._document.set(path, {})
            self._document.set_doc(path, doc)
        elif not isinstance(node, dict):
            message = f'Expected key "{".".join(path)}" to be a mapping, got {_type_label(node)}'
            if not self.is_fail_safe():
                raise ConfigException(message, path=path)
            self._document.set(path, {})
            self._document.set_doc(path, doc)
            self._document.record_repair(path, message)
        return Parser(self._document, path)

    def expect_string(self, key: str, default: str, doc: str = "") -> str:
        return self._expect(key, default, doc, _as_string, "a string")

    def expect_int(self, key: str, default: int, doc: str = "") -> int:
        return self._expect(key, default, doc, _as_int, "an integer")

    def expect_number(self, key: str, default: float, doc: str = "") -> float:
        return self._expect(key, default, doc, _as_number, "a number")

    def expect_bool(self, key: str, default: bool, doc: str = "") -> bool:
        return self._expect(key, default, doc, _as_bool, "true or false")

    def set_value(self, key: str, value: T, reason: str) -> T:
        """Overwrite ``key`` with ``value`` after a semantic check failed."""

        path = self._child(key)
        self._document.set(path, value)
        self._document.record_repair(path, reason)
        return value

    def fail_safe(self, fallback: T, message: str, *, key: str | None = None) -> T:
        """Record ``message`` as a repair and return ``fallback``.

        When ``key`` is given the fallback is also written back to that key.
        """

        if key is None:
            self._document.record_repair(self._path, message)
            return fallback
        return self.set_value(key, fallback, message)

    def _expect(self, key: str, default: T, doc: str, coerce: _Coerce, expected: str) -> T:
        path = self._child(key)
        raw = self._document.get(path)
        if raw is MISSING:
            return self._write_default(path, default, doc, f'Missing key "{".".join(path)}"')

        value = coerce(raw)
        if value is MISSING:
            message = f'Expected key "{".".join(path)}" to be {expected}, got {_type_label(raw)}'
            return self._write_default(path, default, doc, message)
        return value  # type: ignore[no-any-return]

    def _write_default(self, path: tuple[str, ...], default: T, doc: str, message: str) -> T:
        self._document.set(path, default)
        self._document.set_doc(path, doc)
        self._document.record_repair(path, message)
        return default

    def _child(self, key: str) -> tuple[str, ...]:
        if not key or key.startswith(DOC_MARKER):
            raise ValueError(f"invalid config key {key!r}")
        if key not in self._visited:
            self._visited.append(key)
        return (*self._path, key)


def _as_string(value: object) -> object:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return MISSING


def _as_int(value: object) -> object:
    if isinstance(value, bool):
        return MISSING
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return int(value)
    return MISSING


def _as_number(value: object) -> object:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return MISSING
    parsed = float(value)
    if not math.isfinite(parsed):
        return MISSING
    return parsed


def _as_bool(value: object) -> object:
    if isinstance(value, bool):
        return value
    return MISSING


def _type_label(value: object) -> str:
    if value is None:
        return "null"
    if isinstance(value, dict):
        return "mapping"
    if isinstance(value, list):
        return "list"
    return type(value).__name__


__all__ = ["Parser"]
