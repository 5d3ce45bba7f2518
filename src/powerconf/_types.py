"""Foundation types for powerconf.

Provides the exception hierarchy and the ``ErrorMap`` returned by bulk
operations.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(Exception):
    """Base exception for powerconf errors."""


class ConfigurationError(ConfigError):
    """Raised for structural misconfiguration, e.g. an empty source set."""


class DuplicateKeyError(ConfigurationError):
    """Raised when two parameters or sources claim the same key."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Duplicate configuration key '{key}'.")


class KeyCollisionError(ConfigurationError):
    """Raised when distinct keys map to the same external name."""

    def __init__(self, keys: Iterable[str], target: str) -> None:
        self.keys = list(keys)
        self.target = target
        super().__init__(f"Collisions for {target} names: {self.keys}")


class IllegalValueError(ConfigError, ValueError):
    """Raised when a string cannot be parsed for a parameter's type."""

    def __init__(self, message: str, *, key: str | None = None, value: Any = None) -> None:
        self.key = key
        self.value = value
        super().__init__(message)


class ConversionError(ConfigError):
    """Raised when a stored value cannot be rendered as a string."""


# ---------------------------------------------------------------------------
# ErrorMap
# ---------------------------------------------------------------------------


class ErrorMap(dict):
    """Mapping of failing key (or raw token) to a human-readable reason.

    Bulk operations return it instead of raising; an empty map means every
    pair was applied.
    """

    def merge(self, other: Mapping[str, str]) -> "ErrorMap":
        """Add the entries of *other*, keeping reasons already recorded."""
        for key, reason in other.items():
            self.setdefault(key, reason)
        return self

    def __repr__(self) -> str:
        return f"ErrorMap({dict.__repr__(self)})"
