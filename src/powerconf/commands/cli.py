"""Command line helpers for inspecting key names."""

from __future__ import annotations

import sys

import click

from .._keys import KeyFormat, arg_name, collisions, env_name


def names_command(keys: list[str], *, env_prefix: str = "", arg_prefix: str = "-") -> None:
    """Print the environment variable and argument name of every key.

    Exits with status 1 if two keys share an external name.

    Args:
        keys: Configuration keys to translate
        env_prefix: Prefix of the environment variable names
        arg_prefix: Prefix of the argument names
    """
    env_collisions = collisions(keys, KeyFormat.ENV, env_prefix)
    arg_collisions = collisions(keys, KeyFormat.ARG)
    if env_collisions:
        click.secho(f"Error: colliding environment names for {env_collisions}", fg="red", err=True)
    if arg_collisions:
        click.secho(f"Error: colliding argument names for {arg_collisions}", fg="red", err=True)
    if env_collisions or arg_collisions:
        sys.exit(1)

    for key in keys:
        click.echo(f"{key}\t{env_name(key, env_prefix)}\t{arg_prefix}{arg_name(key)}")


@click.group("powerconf")
def powerconf_group():
    """Powerconf commands."""


@powerconf_group.command("names")
@click.argument("keys", nargs=-1, required=True)
@click.option("--env-prefix", default="", help="Prefix of environment variable names")
@click.option("--arg-prefix", default="-", help="Prefix of command line arguments (default: -)")
def names_cli(keys: tuple[str, ...], env_prefix: str, arg_prefix: str) -> None:
    """Show the external names of configuration keys.

    Examples:\n
        powerconf names myApp maxRetries\n
        powerconf names myApp --env-prefix APP_\n
    """
    names_command(list(keys), env_prefix=env_prefix, arg_prefix=arg_prefix)
