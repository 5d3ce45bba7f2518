"""Merges several configurators into one key space.

``MultiConfigurator`` builds a single sorted index of every child's keys once,
at construction, and routes each lookup to the owning child with a binary
search. Construction fails with ``DuplicateKeyError`` if two children claim
the same key.
"""

from __future__ import annotations

import bisect
import logging
from typing import Iterable, Mapping

from ._configurator import UNKNOWN_KEY, ConfigVisitor, Configurator
from ._parameter import Parameter
from ._types import ConfigurationError, DuplicateKeyError, ErrorMap

logger = logging.getLogger(__name__)


class MultiConfigurator:
    """Manages multiple configurators as one."""

    def __init__(
        self,
        configurators: tuple[Configurator, ...],
        keys: tuple[str, ...],
        owners: tuple[int, ...],
    ) -> None:
        self._configurators = configurators
        self._keys = keys
        self._owners = owners

    @classmethod
    def combine(cls, configurators: Iterable[Configurator]) -> "MultiConfigurator":
        """Index the keys of *configurators*.

        Raises ``ConfigurationError`` if *configurators* is empty and
        ``DuplicateKeyError`` if a key belongs to more than one of them.
        """
        children = tuple(configurators)
        if not children:
            raise ConfigurationError("configurators are empty")

        pairs = [(key, i) for i, child in enumerate(children) for key in child.keys()]
        pairs.sort(key=lambda pair: pair[0])

        last_key = None
        for key, _ in pairs:
            if key == last_key:
                raise DuplicateKeyError(key)
            last_key = key

        keys = tuple(key for key, _ in pairs)
        owners = tuple(owner for _, owner in pairs)
        logger.debug("Combined %d configurators into %d keys", len(children), len(keys))
        return cls(children, keys, owners)

    @property
    def configurators(self) -> tuple[Configurator, ...]:
        return self._configurators

    # -- routing ------------------------------------------------------------

    def _index(self, key: str) -> int:
        i = bisect.bisect_left(self._keys, key)
        if i < len(self._keys) and self._keys[i] == key:
            return i
        return -1

    def _owner_of(self, key: str) -> Configurator | None:
        i = self._index(key)
        if i < 0:
            return None
        return self._configurators[self._owners[i]]

    def keys(self) -> list[str]:
        return list(self._keys)

    def has_key(self, key: str) -> bool:
        return self._index(key) >= 0

    def parameter(self, key: str) -> Parameter | None:
        owner = self._owner_of(key)
        if owner is None:
            return None
        return owner.parameter(key)

    def value(self, key: str) -> str | None:
        owner = self._owner_of(key)
        if owner is None:
            return None
        return owner.value(key)

    def set(self, key: str, value: str) -> int:
        owner = self._owner_of(key)
        if owner is None:
            return 0
        return owner.set(key, value)

    def update(self, batch: Mapping[str, str], *, strict: bool = True) -> ErrorMap:
        """Hand *batch* to every child and merge what they reject.

        Each child applies the keys it owns. Keys owned by no child are
        reported as unknown when *strict* is true.
        """
        errors = ErrorMap()
        for child in self._configurators:
            errors.merge(child.update(batch, strict=False))
        if strict:
            for key in batch:
                if not self.has_key(key):
                    errors.setdefault(key, UNKNOWN_KEY)
        return errors

    def walk(self, visitor: ConfigVisitor) -> None:
        for child in self._configurators:
            child.walk(visitor)

    def __repr__(self) -> str:
        return f"MultiConfigurator({len(self._configurators)} configurators, {len(self._keys)} keys)"
