"""Environment source protocol, the ``os.environ`` implementation and an in-memory one for tests."""

from __future__ import annotations

import os
from typing import Protocol, runtime_checkable


@runtime_checkable
class ConfigRepository(Protocol):
    """Abstraction over where environment values come from."""

    def get_env(self, key: str) -> str | None:
        ...


class EnvironRepository:
    """Reads variables from ``os.environ``."""

    def get_env(self, key: str) -> str | None:
        return os.environ.get(key)


class FakeConfigRepository:
    """Dict-backed repository for tests.

    >>> repo = FakeConfigRepository(env={"DEBUG": "1"})
    >>> repo.get_env("DEBUG")
    '1'
    """

    def __init__(self, env: dict[str, str] | None = None) -> None:
        self._env: dict[str, str] = dict(env or {})

    def get_env(self, key: str) -> str | None:
        return self._env.get(key)

    def set_env(self, key: str, value: str) -> None:
        self._env[key] = value

    @property
    def environ(self) -> dict[str, str]:
        return dict(self._env)


# ---------------------------------------------------------------------------
# Module-level repository management
# ---------------------------------------------------------------------------

_active_repository: ConfigRepository | None = None


def set_repository(repo: ConfigRepository | None) -> None:
    """Set the module-level repository; ``None`` restores the ``os.environ`` default."""
    global _active_repository
    _active_repository = repo


def get_repository() -> ConfigRepository | None:
    """Return the module-level repository (may be ``None``)."""
    return _active_repository


def active_repository() -> ConfigRepository:
    """Return the module-level repository, creating an ``EnvironRepository`` if none is set."""
    global _active_repository
    if _active_repository is None:
        _active_repository = EnvironRepository()
    return _active_repository
