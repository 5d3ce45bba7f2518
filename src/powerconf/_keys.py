"""Translation of configuration keys into environment variable and argument names.

A key such as ``myApp`` becomes the command line argument ``-my-app`` and the
environment variable ``MY_APP``:

1. every char that is not an ASCII letter or digit becomes the separator,
2. every run of uppercase letters is preceded by the separator,
3. separator runs collapse into one and leading or trailing separators are dropped,
4. the result is lowercased (arguments) or uppercased (environment),
5. the prefix is prepended verbatim.

The translation is lossy, so external input is never decoded back into a
key. Readers precompute the external name of every known key and match
input against that table.
"""

from __future__ import annotations

import enum
import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from ._repository import ConfigRepository, active_repository
from ._types import KeyCollisionError

logger = logging.getLogger(__name__)

# Command line arguments start with a dash
ARG_PREFIX = "-"

_NOT_ALNUM = re.compile(r"[^A-Za-z0-9]")
_UPPER_RUN = re.compile(r"([A-Z]+)")


class KeyFormat(enum.Enum):
    """Target representation of a key."""

    ARG = ("-", str.lower)
    ENV = ("_", str.upper)

    def __init__(self, separator: str, fold) -> None:
        self.separator = separator
        self.fold = fold


def external_name(key: str, fmt: KeyFormat, prefix: str = "") -> str:
    """Return the external name of *key* in format *fmt*."""
    sep = fmt.separator
    body = _NOT_ALNUM.sub(sep, key)
    body = _UPPER_RUN.sub(sep + r"\1", body)
    body = re.sub(re.escape(sep) + "+", sep, body).strip(sep)
    return prefix + fmt.fold(body)


def arg_name(key: str, prefix: str = "") -> str:
    """``myApp`` -> ``my-app``, ``HTML$Valües`` -> ``html-val-es``."""
    return external_name(key, KeyFormat.ARG, prefix)


def env_name(key: str, prefix: str = "") -> str:
    """``myApp`` -> ``MY_APP``, ``HTML$Valües`` -> ``HTML_VAL_ES``."""
    return external_name(key, KeyFormat.ENV, prefix)


def collisions(keys: Iterable[str], fmt: KeyFormat, prefix: str = "") -> list[str]:
    """Return every key whose external name is shared with another distinct key."""
    distinct = set(keys)
    names = {key: external_name(key, fmt, prefix) for key in distinct}
    counts = Counter(names.values())
    return sorted(key for key, name in names.items() if counts[name] > 1)


def _expected_names(keys: Iterable[str], fmt: KeyFormat, prefix: str) -> dict[str, str]:
    keys = list(keys)
    colliding = collisions(keys, fmt, prefix)
    if colliding:
        raise KeyCollisionError(colliding, fmt.name.lower())
    expected = {external_name(key, fmt, prefix): key for key in keys}
    logger.debug("Expecting %d %s names", len(expected), fmt.name.lower())
    return expected


# ---------------------------------------------------------------------------
# Readers
# ---------------------------------------------------------------------------


@dataclass
class ParseResult:
    """Key/value pairs recognised in external input and the tokens left over."""

    values: dict[str, str] = field(default_factory=dict)
    unused: list[str] = field(default_factory=list)


class ArgumentReader:
    """Parses ``-name=value`` and ``-name`` arguments against a known key set.

    Raises ``KeyCollisionError`` if two keys share an argument name.
    """

    def __init__(self, keys: Iterable[str], prefix: str = ARG_PREFIX) -> None:
        self.prefix = prefix
        self._expected = _expected_names(keys, KeyFormat.ARG, "")

    def read(self, args: Iterable[str]) -> ParseResult:
        """Match every token of *args*; a bare ``-name`` means ``-name=true``."""
        result = ParseResult()
        for token in args:
            if not token.startswith(self.prefix) or token == self.prefix:
                result.unused.append(token)
                continue
            name, sep, value = token[len(self.prefix):].partition("=")
            key = self._expected.get(name)
            if key is None:
                result.unused.append(token)
                continue
            result.values[key] = value if sep else "true"
        return result


class EnvironmentReader:
    """Reads the environment variables of a known key set.

    Raises ``KeyCollisionError`` if two keys share a variable name.
    """

    def __init__(self, keys: Iterable[str], prefix: str = "") -> None:
        self.prefix = prefix
        self._expected = _expected_names(keys, KeyFormat.ENV, prefix)

    def read(self, repo: ConfigRepository | None = None) -> ParseResult:
        """Look up every expected variable in *repo* (the active repository by default)."""
        if repo is None:
            repo = active_repository()
        result = ParseResult()
        for name, key in self._expected.items():
            value = repo.get_env(name)
            if value is not None:
                result.values[key] = value
        return result

    def scan(self, environ: Mapping[str, str]) -> ParseResult:
        """Match every variable in *environ*.

        With a non-empty prefix, prefixed variables that match no key are
        reported as unused; unprefixed variables are ignored.
        """
        result = ParseResult()
        for name, value in environ.items():
            key = self._expected.get(name)
            if key is not None:
                result.values[key] = value
            elif self.prefix and name.startswith(self.prefix):
                result.unused.append(name)
        return result


def get_args(keys: Iterable[str], args: Iterable[str]) -> ParseResult:
    """Parse command line *args* against *keys*."""
    return ArgumentReader(keys).read(args)


def get_env(
    keys: Iterable[str], prefix: str = "", repo: ConfigRepository | None = None
) -> ParseResult:
    """Read the environment variables of *keys*."""
    return EnvironmentReader(keys, prefix).read(repo)
