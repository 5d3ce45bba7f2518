"""Entry points: building configurators and driving them from arguments and the environment."""

from __future__ import annotations

import io
import logging
import sys
from typing import Any, Iterable, TextIO

import click

from ._configurator import Configurator, InstanceConfigurator
from ._help import HelpPrinter
from ._keys import ArgumentReader, EnvironmentReader
from ._multi import MultiConfigurator
from ._repository import ConfigRepository
from ._types import ConfigurationError, ErrorMap

logger = logging.getLogger(__name__)


def manage(*configurators: Configurator) -> Configurator:
    """Combine *configurators* into one.

    A single configurator is returned unchanged. Raises ``ConfigurationError``
    if none is given and ``DuplicateKeyError`` if keys overlap.
    """
    if not configurators:
        raise ConfigurationError("configurators are empty")
    if len(configurators) == 1:
        return configurators[0]
    return MultiConfigurator.combine(configurators)


def configure(*configurations: Any) -> Configurator:
    """Create one configurator for the fields of every object in *configurations*.

    All configurations must have unique keys.
    """
    if not configurations:
        raise ConfigurationError("configurations are empty")
    return manage(*(InstanceConfigurator.control(c) for c in configurations))


def set_from_args(configurator: Configurator, args: Iterable[str]) -> list[str]:
    """Set values from ``-key=value`` arguments.

    Returns the arguments that were not recognised, followed by ``key=reason``
    for every recognised key whose value was rejected.
    """
    parsed = ArgumentReader(configurator.keys()).read(args)
    invalid = configurator.update(parsed.values)
    unused = list(parsed.unused)
    unused.extend(f"{key}={reason}" for key, reason in invalid.items())
    return unused


def set_from_env(
    configurator: Configurator,
    env_prefix: str = "",
    repo: ConfigRepository | None = None,
) -> ErrorMap:
    """Set values from environment variables named after the keys.

    Rejected values are logged and returned.
    """
    parsed = EnvironmentReader(configurator.keys(), env_prefix).read(repo)
    invalid = configurator.update(parsed.values)
    for key, reason in invalid.items():
        logger.warning("Ignoring environment value for '%s': %s", key, reason)
    return invalid


def print_help(
    configurator: Configurator, env_prefix: str = "", out: TextIO | None = None
) -> None:
    """Print every parameter of *configurator*; *out* defaults to stderr.

    *env_prefix* must match the prefix given to ``set_from_env``.
    """
    if out is None:
        out = sys.stderr
    configurator.walk(HelpPrinter(out, env_prefix))
    click.echo("", file=out)


def help_text(configurator: Configurator, env_prefix: str = "") -> str:
    """Return the output of ``print_help`` as a string."""
    buffer = io.StringIO()
    print_help(configurator, env_prefix, buffer)
    return buffer.getvalue()
