"""Parameter descriptors: typed handles on one attribute of a configuration object.

A ``Parameter`` knows its key, default value, description and converter, and
reads or writes the live attribute on the object it is bound to. Descriptors
are built explicitly with ``parameter()`` or in bulk from a pydantic model or
a dataclass with ``parameters()``.
"""

from __future__ import annotations

import bisect
import dataclasses
import enum
import functools
import logging
import threading
import typing
import weakref
from typing import Any, Callable, Iterator

from pydantic import BaseModel, ValidationError

from ._casters import Converter, converter_for
from ._types import ConfigurationError, ConversionError, IllegalValueError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Per-object locks
# ---------------------------------------------------------------------------

_REGISTRY_LOCK = threading.Lock()
# id(obj) -> (reference to obj, lock); entries of weak-referenceable objects
# are dropped when the object is collected
_OBJECT_LOCKS: dict[int, tuple[Callable[[], Any], threading.RLock]] = {}


def _same(obj: Any) -> Any:
    return obj


def lock_for(obj: Any) -> threading.RLock:
    """Return the lock guarding attribute access on *obj*.

    Every descriptor bound to the same instance shares one lock; distinct
    instances never contend.
    """
    with _REGISTRY_LOCK:
        entry = _OBJECT_LOCKS.get(id(obj))
        if entry is not None and entry[0]() is obj:
            return entry[1]
        lock = threading.RLock()
        ref: Callable[[], Any]
        try:
            ref = weakref.ref(obj)
        except TypeError:
            # not weak-referenceable: kept alive so its id cannot be reused
            ref = functools.partial(_same, obj)
        else:
            weakref.finalize(obj, _OBJECT_LOCKS.pop, id(obj), None)
        _OBJECT_LOCKS[id(obj)] = (ref, lock)
        return lock


# ---------------------------------------------------------------------------
# Parameter
# ---------------------------------------------------------------------------


def _unwrap_optional(tp: Any) -> Any:
    args = [arg for arg in typing.get_args(tp) if arg is not type(None)]
    if len(args) == 1 and len(typing.get_args(tp)) == 2:
        return args[0]
    return tp


class Parameter:
    """A configuration parameter bound to one attribute of a configuration object."""

    def __init__(
        self,
        key: str,
        owner: type,
        attribute: str,
        default_value: str,
        description: str,
        converter: Converter,
        value_type: Any,
    ) -> None:
        if not key:
            raise ConfigurationError(f"Empty key for attribute '{attribute}'")
        self._key = key
        self._owner = owner
        self._attribute = attribute
        self._default_value = default_value
        self._description = description
        self._converter = converter
        self._type = value_type

        enum_type = _unwrap_optional(value_type)
        if isinstance(enum_type, type) and issubclass(enum_type, enum.Enum):
            members = sorted(enum_type.__members__.items())
            self._option_names: tuple[str, ...] = tuple(name for name, _ in members)
            self._option_members: tuple[enum.Enum, ...] = tuple(m for _, m in members)
        else:
            self._option_names = ()
            self._option_members = ()

    # -- metadata -----------------------------------------------------------

    @property
    def key(self) -> str:
        return self._key

    @property
    def default_value(self) -> str:
        """String form of the attribute value when the descriptor was created."""
        return self._default_value

    @property
    def description(self) -> str:
        return self._description

    @property
    def type(self) -> Any:
        return self._type

    @property
    def attribute(self) -> str:
        return self._attribute

    @property
    def converter(self) -> Converter:
        return self._converter

    def options(self) -> list[str]:
        """Enum member names sorted alphabetically; empty for other types."""
        return list(self._option_names)

    def option_description(self, option: str) -> str | None:
        """Documentation of enum member *option*, or ``None`` if there is none."""
        i = bisect.bisect_left(self._option_names, option)
        if i == len(self._option_names) or self._option_names[i] != option:
            return None
        return getattr(self._option_members[i], "description", None)

    # -- conversion ---------------------------------------------------------

    def from_string(self, value: str) -> Any:
        try:
            return self._converter.from_string(value)
        except IllegalValueError as e:
            if e.key is None:
                e.key = self._key
            raise
        except (TypeError, ValueError) as e:
            raise IllegalValueError(
                f"Illegal value {value!r} for '{self._key}': {e}", key=self._key, value=value
            ) from e

    def to_string(self, value: Any) -> str:
        try:
            return self._converter.to_string(value)
        except ConversionError:
            raise
        except Exception as e:
            raise ConversionError(f"Cannot render the value of '{self._key}': {e}") from e

    # -- live value ---------------------------------------------------------

    def get(self, obj: Any) -> str:
        """Read the attribute from *obj* and render it as a string."""
        with lock_for(obj):
            value = getattr(obj, self._attribute)
        return self.to_string(value)

    def set(self, obj: Any, value: str) -> None:
        """Parse *value* and write it to the attribute on *obj*."""
        parsed = self.from_string(value)
        try:
            with lock_for(obj):
                setattr(obj, self._attribute, parsed)
        except ValidationError as e:
            raise IllegalValueError(
                f"Illegal value {value!r} for '{self._key}'", key=self._key, value=value
            ) from e

    # -- identity -----------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Parameter):
            return NotImplemented
        return (
            self._key == other._key
            and self._owner is other._owner
            and self._attribute == other._attribute
            and self._converter == other._converter
        )

    def __hash__(self) -> int:
        return hash((self._key, self._owner, self._attribute))

    def __repr__(self) -> str:
        return f"Parameter({self._key!r}, default={self._default_value!r})"

    def __str__(self) -> str:
        return f"{self._key} ({self._default_value}): {self._description}"


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


def _attribute_type(obj: Any, attribute: str) -> Any:
    cls = type(obj)
    if isinstance(obj, BaseModel):
        info = cls.model_fields.get(attribute)
        if info is not None:
            return info.annotation
    try:
        hints = typing.get_type_hints(cls)
    except (NameError, TypeError):
        hints = {}
    if attribute in hints:
        return hints[attribute]
    return type(getattr(obj, attribute))


def parameter(
    obj: Any,
    attribute: str,
    *,
    key: str | None = None,
    converter: Converter | None = None,
    description: str = "",
    key_prefix: str = "",
    value_type: Any = None,
) -> Parameter:
    """Create a ``Parameter`` for *attribute* on *obj*.

    Args:
        obj: The configuration instance, must not be ``None``.
        attribute: Name of the attribute holding the value.
        key: Key of the parameter; the attribute name if omitted.
        converter: String converter; the default for the attribute type if omitted.
        description: Human-readable description.
        key_prefix: Prepended to the key.
        value_type: Declared type; taken from annotations if omitted.
    """
    if obj is None:
        raise ConfigurationError("configuration is None")
    if not hasattr(obj, attribute):
        raise ConfigurationError(f"{type(obj).__name__} has no attribute '{attribute}'")

    if value_type is None:
        value_type = _attribute_type(obj, attribute)
    if converter is None:
        converter = converter_for(value_type)

    full_key = key_prefix + (key or attribute)
    with lock_for(obj):
        current = getattr(obj, attribute)
    try:
        default_value = converter.to_string(current)
    except Exception as e:
        raise ConfigurationError(f"Cannot render the default of '{full_key}': {e}") from e

    return Parameter(
        key=full_key,
        owner=type(obj),
        attribute=attribute,
        default_value=default_value,
        description=description,
        converter=converter,
        value_type=value_type,
    )


def _model_fields(obj: BaseModel, key_prefix: str) -> Iterator[Parameter]:
    for name, info in type(obj).model_fields.items():
        yield parameter(
            obj,
            name,
            key=info.alias or name,
            description=info.description or "",
            key_prefix=key_prefix,
            value_type=info.annotation,
        )


def _dataclass_fields(obj: Any, key_prefix: str) -> Iterator[Parameter]:
    try:
        hints = typing.get_type_hints(type(obj))
    except NameError:
        hints = {}
    for f in dataclasses.fields(obj):
        meta = f.metadata
        if meta.get("parameter", True) is False:
            continue
        value_type = hints.get(f.name, f.type)
        if isinstance(value_type, str):
            # unresolved forward reference
            value_type = type(getattr(obj, f.name))
        yield parameter(
            obj,
            f.name,
            key=meta.get("key") or f.name,
            converter=meta.get("converter"),
            description=meta.get("description", ""),
            key_prefix=key_prefix,
            value_type=value_type,
        )


def parameters(obj: Any, key_prefix: str = "") -> list[Parameter]:
    """Fetch a ``Parameter`` for every field of a pydantic model or dataclass.

    Pydantic fields use their alias (or name) as key and ``Field(description=...)``
    as description. Dataclass fields read ``key``, ``description`` and
    ``converter`` from ``field(metadata=...)``; ``metadata={"parameter": False}``
    excludes a field.
    """
    if obj is None:
        raise ConfigurationError("configuration is None")
    if isinstance(obj, BaseModel):
        params = list(_model_fields(obj, key_prefix))
    elif dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        params = list(_dataclass_fields(obj, key_prefix))
    else:
        raise ConfigurationError(
            f"Cannot fetch parameters of {type(obj).__name__}: "
            "expected a pydantic model or dataclass instance"
        )
    logger.debug("Fetched %d parameters from %s", len(params), type(obj).__name__)
    return params
