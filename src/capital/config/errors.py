"""Error types raised by config parsing and loading."""

from __future__ import annotations

from collections.abc import Sequence


class ConfigException(ValueError):
    """A module found a structural config problem it cannot repair in place.

    Raised from a module's ``parse``; the loader catches it, archives the
    document and regenerates it from defaults.
    """

    def __init__(self, message: str, *, path: Sequence[str] = ()) -> None:
        self.path = tuple(path)
        self.message = message
        if self.path:
            super().__init__(f"{'.'.join(self.path)}: {message}")
        else:
            super().__init__(message)


class RegistrationError(LookupError):
    """A config module was requested that is not in the registration table."""


class TypeMismatchError(TypeError):
    """A module's ``parse`` produced a value that is not an instance of the module."""


class ConfigRegenerationError(RuntimeError):
    """Even the regenerated (empty document) pass failed; startup must abort."""


__all__ = [
    "ConfigException",
    "ConfigRegenerationError",
    "RegistrationError",
    "TypeMismatchError",
]
