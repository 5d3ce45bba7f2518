"""Plain-text help listing for configurators."""

from __future__ import annotations

from typing import TextIO

import click

from ._configurator import InstanceConfigurator
from ._keys import ARG_PREFIX, arg_name, env_name
from ._parameter import Parameter


class HelpPrinter:
    """``ConfigVisitor`` writing one line per parameter.

    Each line shows the key, the environment variable, the command line
    argument, the current and the default value and the description. Enum
    options follow on indented lines.
    """

    def __init__(self, out: TextIO | None = None, env_prefix: str = "") -> None:
        self.out = out
        self.env_prefix = env_prefix

    def _echo(self, line: str = "") -> None:
        click.echo(line, file=self.out)

    def visit_configuration(self, configurator: InstanceConfigurator) -> None:
        header = configurator.name
        if configurator.description:
            header = f"{header}: {configurator.description}"
        self._echo(header)

    def visit_parameter(
        self, configurator: InstanceConfigurator, parameter: Parameter, value: str
    ) -> None:
        key = parameter.key
        line = (
            f"  {key}  {env_name(key, self.env_prefix)}  {ARG_PREFIX}{arg_name(key)}"
            f"  = {value!r} (default {parameter.default_value!r})"
        )
        if parameter.description:
            line = f"{line}  {parameter.description}"
        self._echo(line)
        for option in parameter.options():
            doc = parameter.option_description(option)
            self._echo(f"      {option}: {doc}" if doc else f"      {option}")
