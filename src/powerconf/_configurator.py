"""Configurators: keyed collections of parameters bound to one configuration object."""

from __future__ import annotations

import bisect
import dataclasses
import logging
from typing import Any, Iterable, Mapping, Protocol, Sequence, runtime_checkable

from ._parameter import Parameter, parameters
from ._types import DuplicateKeyError, ErrorMap, IllegalValueError

logger = logging.getLogger(__name__)

UNKNOWN_KEY = "unknown key"


class ConfigVisitor(Protocol):
    """Receives the configurations and parameters of a ``Configurator.walk``."""

    def visit_configuration(self, configurator: "InstanceConfigurator") -> None:
        ...

    def visit_parameter(
        self, configurator: "InstanceConfigurator", parameter: Parameter, value: str
    ) -> None:
        ...


@runtime_checkable
class Configurator(Protocol):
    """Key-addressed access to configuration parameters.

    Lookup misses are never errors: ``parameter`` and ``value`` return
    ``None``, ``set`` returns ``0`` and ``has_key`` returns ``False``.
    """

    def keys(self) -> list[str]:
        ...

    def has_key(self, key: str) -> bool:
        ...

    def parameter(self, key: str) -> Parameter | None:
        ...

    def value(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> int:
        ...

    def update(self, batch: Mapping[str, str], *, strict: bool = True) -> ErrorMap:
        ...

    def walk(self, visitor: ConfigVisitor) -> None:
        ...


def _class_summary(cls: type) -> str:
    doc = cls.__doc__
    # dataclasses without a docstring get their signature as __doc__
    if not doc or (dataclasses.is_dataclass(cls) and doc.startswith(f"{cls.__name__}(")):
        return ""
    return doc.strip().splitlines()[0].strip()


class InstanceConfigurator:
    """Manages the parameters of a single configuration object."""

    def __init__(
        self,
        configuration: Any,
        name: str,
        description: str,
        params: Iterable[Parameter],
    ) -> None:
        ordered = sorted(params, key=lambda p: p.key)
        for previous, current in zip(ordered, ordered[1:]):
            if previous.key == current.key:
                raise DuplicateKeyError(current.key)
        self._configuration = configuration
        self._name = name
        self._description = description
        self._params: tuple[Parameter, ...] = tuple(ordered)
        self._keys: tuple[str, ...] = tuple(p.key for p in ordered)

    @classmethod
    def control(
        cls,
        configuration: Any,
        name: str | None = None,
        description: str | None = None,
        params: Sequence[Parameter] = (),
        key_prefix: str = "",
    ) -> "InstanceConfigurator":
        """Create a configurator for *configuration*.

        If *params* is empty, the parameters are fetched from the fields of
        *configuration* (see ``parameters``). Name and description default to
        the class name and the first line of the class docstring.
        """
        if not params:
            params = parameters(configuration, key_prefix)
        cls_ = type(configuration)
        configurator = cls(
            configuration,
            name if name is not None else cls_.__name__,
            description if description is not None else _class_summary(cls_),
            params,
        )
        logger.debug("Configurator %r controls keys %s", configurator.name, configurator._keys)
        return configurator

    # -- metadata -----------------------------------------------------------

    @property
    def configuration(self) -> Any:
        return self._configuration

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    # -- lookup -------------------------------------------------------------

    def _index(self, key: str) -> int:
        i = bisect.bisect_left(self._keys, key)
        if i < len(self._keys) and self._keys[i] == key:
            return i
        return -1

    def keys(self) -> list[str]:
        return list(self._keys)

    def has_key(self, key: str) -> bool:
        return self._index(key) >= 0

    def parameter(self, key: str) -> Parameter | None:
        i = self._index(key)
        if i < 0:
            return None
        return self._params[i]

    def value(self, key: str) -> str | None:
        param = self.parameter(key)
        if param is None:
            return None
        return param.get(self._configuration)

    # -- mutation -----------------------------------------------------------

    def set(self, key: str, value: str) -> int:
        """Set *key* to *value*; return 1 if applied and 0 if the key is unknown.

        Raises ``IllegalValueError`` if *value* does not parse.
        """
        param = self.parameter(key)
        if param is None:
            return 0
        param.set(self._configuration, value)
        return 1

    def update(self, batch: Mapping[str, str], *, strict: bool = True) -> ErrorMap:
        """Apply every pair in *batch* and return the ones that failed.

        Values that do not parse are always reported. Unknown keys are
        reported when *strict* is true and skipped silently otherwise.
        """
        errors = ErrorMap()
        for key, value in batch.items():
            param = self.parameter(key)
            if param is None:
                if strict:
                    errors[key] = UNKNOWN_KEY
                continue
            try:
                param.set(self._configuration, value)
            except IllegalValueError as e:
                errors[key] = str(e)
        return errors

    def walk(self, visitor: ConfigVisitor) -> None:
        visitor.visit_configuration(self)
        for param in self._params:
            visitor.visit_parameter(self, param, param.get(self._configuration))

    def __repr__(self) -> str:
        return f"InstanceConfigurator({self._name!r}, keys={list(self._keys)!r})"
