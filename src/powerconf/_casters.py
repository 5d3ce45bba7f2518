"""String converters for parameter values.

Every converter turns a raw string (from an environment variable or a
command line argument) into the typed attribute value and renders the typed
value back into its canonical string form.
"""

from __future__ import annotations

import enum
import types
from dataclasses import dataclass, field
from typing import Any, Callable, Literal, Protocol, Sequence, Union, get_args, get_origin

from pydantic import TypeAdapter, ValidationError

from ._types import ConversionError, IllegalValueError


class Converter(Protocol):
    """Translates between strings and typed values."""

    def from_string(self, value: str) -> Any:
        ...

    def to_string(self, value: Any) -> str:
        ...


# ---------------------------------------------------------------------------
# Bool caster
# ---------------------------------------------------------------------------

_TRUTHY = frozenset({"1", "true", "yes", "on", "t", "y"})
_FALSY = frozenset({"0", "false", "no", "off", "f", "n", ""})


def _cast_bool(value: Any) -> bool:
    """Cast a value to ``bool``, handling common string representations.

    Raises ``IllegalValueError`` for unrecognised strings.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        lower = value.strip().lower()
        if lower in _TRUTHY:
            return True
        if lower in _FALSY:
            return False
        raise IllegalValueError(f"Cannot cast {value!r} to bool", value=value)
    raise IllegalValueError(f"Cannot cast {type(value).__name__} to bool", value=value)


# ---------------------------------------------------------------------------
# Primitive converters
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StrConverter:
    def from_string(self, value: str) -> str:
        return value

    def to_string(self, value: Any) -> str:
        return "" if value is None else str(value)


@dataclass(frozen=True)
class IntConverter:
    def from_string(self, value: str) -> int:
        try:
            return int(value.strip())
        except (AttributeError, ValueError) as e:
            raise IllegalValueError(f"Cannot cast {value!r} to int", value=value) from e

    def to_string(self, value: Any) -> str:
        if not isinstance(value, int) or isinstance(value, bool):
            raise ConversionError(f"Expected int, got {type(value).__name__}")
        return str(value)


@dataclass(frozen=True)
class FloatConverter:
    def from_string(self, value: str) -> float:
        try:
            return float(value.strip())
        except (AttributeError, ValueError) as e:
            raise IllegalValueError(f"Cannot cast {value!r} to float", value=value) from e

    def to_string(self, value: Any) -> str:
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            raise ConversionError(f"Expected float, got {type(value).__name__}")
        return repr(float(value))


@dataclass(frozen=True)
class BoolConverter:
    def from_string(self, value: str) -> bool:
        return _cast_bool(value)

    def to_string(self, value: Any) -> str:
        if not isinstance(value, bool):
            raise ConversionError(f"Expected bool, got {type(value).__name__}")
        return "true" if value else "false"


@dataclass(frozen=True)
class EnumConverter:
    """Parses enum members by name."""

    enum_type: type[enum.Enum]

    def from_string(self, value: str) -> enum.Enum:
        try:
            return self.enum_type[value]
        except KeyError:
            names = sorted(self.enum_type.__members__)
            raise IllegalValueError(
                f"{value!r} is not a member of {self.enum_type.__name__}. Must be one of {names}",
                value=value,
            ) from None

    def to_string(self, value: Any) -> str:
        if not isinstance(value, self.enum_type):
            raise ConversionError(f"Expected {self.enum_type.__name__}, got {value!r}")
        return value.name


@dataclass(frozen=True)
class OptionalConverter:
    """Wraps another converter; the empty string stands for ``None``."""

    inner: Any

    def from_string(self, value: str) -> Any:
        if value == "":
            return None
        return self.inner.from_string(value)

    def to_string(self, value: Any) -> str:
        if value is None:
            return ""
        return self.inner.to_string(value)


@dataclass(frozen=True)
class AdapterConverter:
    """Falls back to pydantic validation for types without a dedicated converter."""

    target: Any
    _adapter: TypeAdapter = field(init=False, repr=False, compare=False, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_adapter", TypeAdapter(self.target))

    def from_string(self, value: str) -> Any:
        try:
            return self._adapter.validate_python(value)
        except ValidationError as e:
            raise IllegalValueError(
                f"Cannot cast {value!r} to {getattr(self.target, '__name__', self.target)}",
                value=value,
            ) from e

    def to_string(self, value: Any) -> str:
        try:
            dumped = self._adapter.dump_python(value, mode="json")
        except Exception as e:
            raise ConversionError(f"Cannot render {value!r}") from e
        return dumped if isinstance(dumped, str) else str(dumped)


# ---------------------------------------------------------------------------
# Csv
# ---------------------------------------------------------------------------


class Csv:
    """Split a string into a list, with optional per-element casting.

    >>> Csv().from_string("a, b, c")
    ['a', 'b', 'c']
    >>> Csv(cast=int).to_string([1, 2, 3])
    '1,2,3'
    """

    def __init__(
        self,
        cast: Callable[[str], Any] = str,
        delimiter: str = ",",
        strip: bool = True,
    ) -> None:
        self.cast = cast
        self.delimiter = delimiter
        self.strip = strip

    def from_string(self, value: str) -> list[Any]:
        parts = value.split(self.delimiter)
        if self.strip:
            parts = [p.strip() for p in parts]
        try:
            return [self.cast(p) for p in parts if p]
        except ValueError as e:
            raise IllegalValueError(f"Cannot cast {value!r}: {e}", value=value) from e

    def to_string(self, value: Any) -> str:
        if not isinstance(value, (list, tuple)):
            raise ConversionError(f"Expected a list, got {type(value).__name__}")
        return self.delimiter.join(str(v) for v in value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Csv):
            return NotImplemented
        return (self.cast, self.delimiter, self.strip) == (other.cast, other.delimiter, other.strip)

    def __hash__(self) -> int:
        return hash((Csv, self.cast, self.delimiter, self.strip))


# ---------------------------------------------------------------------------
# Choices
# ---------------------------------------------------------------------------


class Choices:
    """Validate that a value is one of a fixed set of choices.

    >>> Choices(["debug", "info", "warning"]).from_string("info")
    'info'
    """

    def __init__(
        self,
        choices: Sequence[Any],
        cast: Callable[[Any], Any] = str,
    ) -> None:
        self.choices = tuple(choices)
        self.cast = cast

    def from_string(self, value: str) -> Any:
        try:
            casted = self.cast(value)
        except ValueError as e:
            raise IllegalValueError(f"Cannot cast {value!r}: {e}", value=value) from e
        if casted not in self.choices:
            raise IllegalValueError(
                f"{casted!r} is not a valid choice. Must be one of {list(self.choices)}",
                value=value,
            )
        return casted

    def to_string(self, value: Any) -> str:
        return str(value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Choices):
            return NotImplemented
        return (self.choices, self.cast) == (other.choices, other.cast)

    def __hash__(self) -> int:
        return hash((Choices, self.choices, self.cast))


# ---------------------------------------------------------------------------
# Strategy table
# ---------------------------------------------------------------------------

_CONVERTERS: dict[Any, Converter] = {
    str: StrConverter(),
    int: IntConverter(),
    float: FloatConverter(),
    bool: BoolConverter(),
}


def _is_optional(tp: Any) -> bool:
    origin = get_origin(tp)
    return (origin is Union or origin is types.UnionType) and type(None) in get_args(tp)


def converter_for(tp: Any) -> Converter:
    """Return the default converter for *tp*.

    Primitives and enums use dedicated converters; ``Optional[X]`` wraps the
    converter of ``X``; ``Literal[...]`` becomes a ``Choices``; everything
    else is validated through a pydantic ``TypeAdapter``.
    """
    if tp in _CONVERTERS:
        return _CONVERTERS[tp]
    if isinstance(tp, type) and issubclass(tp, enum.Enum):
        return EnumConverter(tp)
    if _is_optional(tp):
        inner = [arg for arg in get_args(tp) if arg is not type(None)]
        if len(inner) == 1:
            return OptionalConverter(converter_for(inner[0]))
    if get_origin(tp) is Literal:
        args = get_args(tp)
        return Choices(args, cast=type(args[0]) if args else str)
    return AdapterConverter(tp)
