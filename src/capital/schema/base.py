"""
capital — account schema protocol

File: src/capital/schema/base.py

Purpose
- Describe which accounts a player owns and how to create them, from one static
  config subtree, while leaving some parameters to be supplied at runtime.

Functional requirements
- ``build`` constructs a schema from the global config; ``clone_with_config``
  layers a use-site subtree on top and always returns a new object.
- Variable slots are partitioned into required (not yet supplied) and optional
  (supplied, or never required). Supplying a slot moves it to optional exactly once.
- ``is_complete()`` iff no required variables remain; the four ``get_*`` queries
  return a value iff the schema is complete.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from capital.entities import Player
from capital.labels import LabelSelector, LabelSet
from capital.schema.setup import InitialSetup, MigrationSetup

if TYPE_CHECKING:
    from typing import Self

    from capital.config.parser import Parser

V = TypeVar("V")


class InvalidConfigError(ValueError):
    """A use-site config subtree holds overrides this schema cannot accept.

    ``key`` names the offending key relative to the subtree and ``fallback`` is
    a value that makes the subtree acceptable again.
    """

    def __init__(self, reason: str, *, key: str, fallback: object) -> None:
        super().__init__(f'{reason} (key "{key}")')
        self.reason = reason
        self.key = key
        self.fallback = fallback


class VariableError(RuntimeError):
    """A variable was supplied a second time."""


class Variable(Generic[V]):
    """A runtime parameter slot of one schema instance.

    ``apply`` validates the value and mutates the owning schema; it raises
    ``ValueError`` to reject a value, which leaves the slot required.
    """

    __slots__ = ("_apply", "_consumed", "name", "purpose", "value_type")

    def __init__(
        self,
        name: str,
        purpose: str,
        value_type: type[V],
        apply: Callable[[V], None],
        *,
        consumed: bool = False,
    ) -> None:
        self.name = name
        self.purpose = purpose
        self.value_type = value_type
        self._apply = apply
        self._consumed = consumed

    def __repr__(self) -> str:
        state = "supplied" if self._consumed else "required"
        return f"Variable({self.name!r}, {state})"

    @property
    def consumed(self) -> bool:
        return self._consumed

    def process_value(self, value: V) -> None:
        if self._consumed:
            raise VariableError(f"variable {self.name!r} has already been supplied")
        if not isinstance(value, self.value_type):
            raise ValueError(
                f"variable {self.name!r} expects {self.value_type.__name__}, "
                f"got {type(value).__name__}"
            )
        self._apply(value)
        self._consumed = True


class Schema(ABC):
    """One account schema variant. Subclasses are listed in the type registry."""

    @classmethod
    @abstractmethod
    def build(cls, global_config: Parser) -> Self:
        """Construct the schema from its global config subtree."""

    @classmethod
    @abstractmethod
    def describe(cls) -> str:
        """Documentation string for the variant's config block."""

    @abstractmethod
    def clone_with_config(self, specific_config: Parser | None) -> Schema:
        """Return a new schema with ``specific_config`` layered on top of this one.

        Raises :class:`InvalidConfigError` when the subtree holds invalid overrides.
        """

    @abstractmethod
    def _variables(self) -> Sequence[Variable[Any]]:
        """All variable slots of this instance, supplied or not."""

    def get_required_variables(self) -> list[Variable[Any]]:
        return [variable for variable in self._variables() if not variable.consumed]

    def get_optional_variables(self) -> list[Variable[Any]]:
        return [variable for variable in self._variables() if variable.consumed]

    def is_complete(self) -> bool:
        return not self.get_required_variables()

    def get_selector(self, player: Player) -> LabelSelector | None:
        if not self.is_complete():
            return None
        return self._selector(player)

    def get_overwrite_labels(self, player: Player) -> LabelSet | None:
        if not self.is_complete():
            return None
        return self._overwrite_labels(player)

    def get_migration_setup(self, player: Player) -> MigrationSetup | None:
        if not self.is_complete():
            return None
        return self._migration_setup(player)

    def get_initial_setup(self, player: Player) -> InitialSetup | None:
        if not self.is_complete():
            return None
        return self._initial_setup(player)

    @abstractmethod
    def _selector(self, player: Player) -> LabelSelector: ...

    @abstractmethod
    def _overwrite_labels(self, player: Player) -> LabelSet: ...

    @abstractmethod
    def _migration_setup(self, player: Player) -> MigrationSetup: ...

    @abstractmethod
    def _initial_setup(self, player: Player) -> InitialSetup: ...


__all__ = [
    "InvalidConfigError",
    "Schema",
    "Variable",
    "VariableError",
]
