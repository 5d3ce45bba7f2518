"""Test utilities for powerconf."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from ._repository import FakeConfigRepository, get_repository, set_repository


@contextmanager
def override_env(env: dict[str, str] | None = None) -> Iterator[FakeConfigRepository]:
    """Temporarily replace the environment with a ``FakeConfigRepository``.

    Usage::

        with override_env({"APP_PORT": "9000"}) as repo:
            set_from_env(configurator, "APP_")
            repo.set_env("APP_DEBUG", "1")  # mutate inside context
    """
    previous = get_repository()
    fake = FakeConfigRepository(env=env)
    set_repository(fake)
    try:
        yield fake
    finally:
        set_repository(previous)
