"""
structdiffer.values — Value Model Adapter.

Before two values can be walked in lockstep, the engine has to know
what SHAPE they share.  Python carries no static types at runtime, so
the shape of a position is taken from the best declaration available:

    1. an explicit ``declared=`` type handed to ``Differ.compare``
    2. the type hints of the enclosing record (dataclass / NamedTuple)
    3. the type arguments of the enclosing container (``list[int]``,
       ``dict[str, Item]``, ``tuple[int, str]``, ``Optional[X]``)
    4. the runtime type of the two values ("undeclared")

Shapes:
    SCALAR       number, bool, bytes, enum, set, any other leaf
    TEXT         str (the one scalar that trim rules apply to)
    NULLABLE     Optional[X], or a position where a side is None
    SEQUENCE     list[X], Sequence[X], tuple[X, ...], runtime list
    FIXED_ARRAY  tuple[X, Y], runtime tuple (length is part of the type)
    RECORD       dataclass or NamedTuple instance
    MAP          dict[K, V], Mapping[K, V], runtime dict
    DYNAMIC      Any / object: decoded-JSON style payload, inspected
                 at runtime as str, number, bool, list or dict
"""

import collections.abc
import dataclasses
import functools
import numbers
import types
import typing
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Optional

from .errors import TypeMismatchError, UnsupportedValueError


class Kind(Enum):
    """Structural kind of a comparison position."""
    SCALAR = auto()
    TEXT = auto()
    NULLABLE = auto()
    SEQUENCE = auto()
    FIXED_ARRAY = auto()
    RECORD = auto()
    MAP = auto()
    DYNAMIC = auto()


class _Sentinel:
    __slots__ = ("_name",)

    def __init__(self, name: str):
        self._name = name

    def __repr__(self) -> str:
        return self._name


# No declaration known for a position: resolve from the runtime types.
UNDECLARED = _Sentinel("UNDECLARED")

# A record field that was declared but never set on the instance.
MISSING = _Sentinel("MISSING")

# Declared type used for numbers found inside dynamic payloads, where
# 1 and 1.0 are the same decoded JSON number.
NUMBER = numbers.Real

# PEP 484 numeric tower: an int is a valid float, an int or float a
# valid complex.
_NUMERIC_TOWER = {
    float: (int, float),
    complex: (int, float, complex),
}

_ANONYMOUS = (list, dict, tuple, type(None))
_SEQUENCE_ORIGINS = (
    list,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
)
_MAP_ORIGINS = (
    dict,
    collections.abc.Mapping,
    collections.abc.MutableMapping,
)


@dataclass(frozen=True, slots=True)
class Shape:
    """
    The structural kind two values share, plus what the engine needs to
    descend into them.

        item    declared type of sequence elements, map values, or the
                referent of a nullable
        items   per-index declared types of a fixed array (empty when
                undeclared)
        fields  (name, declared type) pairs of a record, in order
    """
    kind: Kind
    name: str = ""
    item: Any = UNDECLARED
    items: tuple = ()
    fields: tuple = ()


# ═══════════════════════════════════════════════════════════════════
#  TYPE NAMES
# ═══════════════════════════════════════════════════════════════════

def type_name(tp: Any) -> str:
    """
    Name of a declared or runtime type, or "" when the type is anonymous.

    Builtin containers and generic aliases (``list[int]``) have no name
    of their own; ``Optional[X]`` takes the name of ``X``.
    """
    if _is_union(tp):
        members = [arg for arg in typing.get_args(tp) if arg is not type(None)]
        return type_name(members[0]) if len(members) == 1 else ""
    if tp is Any or tp is object:
        return ""
    if not isinstance(tp, type) or typing.get_origin(tp) is not None:
        return ""
    if tp in _ANONYMOUS:
        return ""
    return tp.__name__


def _is_union(tp: Any) -> bool:
    origin = typing.get_origin(tp)
    return origin is typing.Union or origin is types.UnionType


# ═══════════════════════════════════════════════════════════════════
#  RECORDS
# ═══════════════════════════════════════════════════════════════════

def is_record(obj: Any) -> bool:
    """True for dataclass instances and NamedTuple instances."""
    if isinstance(obj, type):
        return False
    if dataclasses.is_dataclass(obj):
        return True
    return isinstance(obj, tuple) and hasattr(type(obj), "_fields")


@functools.lru_cache(maxsize=None)
def record_fields(cls: type) -> tuple:
    """(name, declared type) for every field of a record class, in order."""
    try:
        hints = typing.get_type_hints(cls)
    except NameError:
        # Forward reference that cannot be resolved here (e.g. an import
        # under TYPE_CHECKING): fall back to the runtime types.
        hints = {}
    if dataclasses.is_dataclass(cls):
        names = [f.name for f in dataclasses.fields(cls)]
    else:
        names = list(cls._fields)
    return tuple((name, hints.get(name, UNDECLARED)) for name in names)


def field_value(obj: Any, name: str) -> Any:
    """Read a record field, or MISSING if it was never set."""
    return getattr(obj, name, MISSING)


# ═══════════════════════════════════════════════════════════════════
#  SHAPE RESOLUTION
# ═══════════════════════════════════════════════════════════════════

def _declared_shape(tp: Any) -> Optional[Shape]:
    """
    Shape implied by a declaration alone, or None when the declaration
    is a plain class whose shape must come from the runtime values.
    """
    if tp is Any or tp is object:
        return Shape(Kind.DYNAMIC)
    if tp is NUMBER:
        return Shape(Kind.SCALAR, "number")
    if tp is None or tp is type(None):
        return Shape(Kind.NULLABLE)

    if _is_union(tp):
        args = typing.get_args(tp)
        members = tuple(arg for arg in args if arg is not type(None))
        if len(members) == len(args):
            # Union[int, str]: the runtime values decide.
            return None
        inner = members[0] if len(members) == 1 else UNDECLARED
        return Shape(Kind.NULLABLE, type_name(tp), item=inner)

    origin = typing.get_origin(tp)
    args = typing.get_args(tp)
    if origin is None:
        if tp is list:
            return Shape(Kind.SEQUENCE)
        if tp is dict:
            return Shape(Kind.MAP)
        if tp is tuple:
            return Shape(Kind.FIXED_ARRAY)
        return None

    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return Shape(Kind.SEQUENCE, item=args[0])
        return Shape(Kind.FIXED_ARRAY, items=args)
    if origin in _SEQUENCE_ORIGINS:
        return Shape(Kind.SEQUENCE, item=args[0] if args else UNDECLARED)
    if origin in _MAP_ORIGINS:
        return Shape(Kind.MAP, item=args[1] if len(args) == 2 else UNDECLARED)
    return None


def _runtime_shape(value: Any) -> Shape:
    """Shape of an undeclared position, from one side's runtime type."""
    if value is None:
        return Shape(Kind.NULLABLE)
    if isinstance(value, str):
        return Shape(Kind.TEXT, type_name(type(value)))
    if is_record(value):
        cls = type(value)
        return Shape(Kind.RECORD, cls.__name__, fields=record_fields(cls))
    if type(value) is list:
        return Shape(Kind.SEQUENCE)
    if type(value) is tuple:
        return Shape(Kind.FIXED_ARRAY)
    if type(value) is dict:
        return Shape(Kind.MAP)
    return Shape(Kind.SCALAR, type_name(type(value)))


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _in_tower(value: Any, declared: type) -> bool:
    return isinstance(value, _NUMERIC_TOWER[declared]) and not isinstance(value, bool)


def _mismatch(a: Any, b: Any, path: Optional[str]) -> TypeMismatchError:
    return TypeMismatchError(
        f"type mismatch: A is {type(a).__name__}, B is {type(b).__name__}", path
    )


def resolve(a: Any, b: Any, declared: Any = UNDECLARED,
            path: Optional[str] = None) -> Shape:
    """
    Classify the pair (a, b) into the single Shape they share.

    Raises TypeMismatchError when the two sides cannot share a declared
    type at this position.  A nullable position accepts None on either
    side; everywhere else both sides must have the identical runtime
    type (so a bool is never an int).
    """
    shape = None
    if declared is not UNDECLARED:
        shape = _declared_shape(declared)

    if shape is None:
        # Undeclared, or declared as a plain class.
        if (a is None) != (b is None) and declared is UNDECLARED:
            return Shape(Kind.NULLABLE)
        if declared in _NUMERIC_TOWER and _in_tower(a, declared) and _in_tower(b, declared):
            return Shape(Kind.SCALAR, declared.__name__)
        if type(a) is not type(b):
            raise _mismatch(a, b, path)
        shape = _runtime_shape(a)
        if shape.kind is Kind.FIXED_ARRAY:
            _check_fixed_length(a, b, shape, path)
        return shape

    if shape.kind in (Kind.NULLABLE, Kind.DYNAMIC):
        return shape
    if shape.kind is Kind.SCALAR:
        # Only NUMBER lands here.
        if not (_is_number(a) and _is_number(b)):
            raise _mismatch(a, b, path)
        return shape

    if type(a) is not type(b):
        raise _mismatch(a, b, path)
    if shape.kind is Kind.SEQUENCE:
        if isinstance(a, (str, bytes)) or not isinstance(a, collections.abc.Sequence):
            raise TypeMismatchError(
                f"declared a sequence, got {type(a).__name__}", path
            )
    elif shape.kind is Kind.MAP:
        if not isinstance(a, collections.abc.Mapping):
            raise TypeMismatchError(f"declared a map, got {type(a).__name__}", path)
    elif shape.kind is Kind.FIXED_ARRAY:
        if not isinstance(a, tuple):
            raise TypeMismatchError(f"declared a tuple, got {type(a).__name__}", path)
    if shape.kind is Kind.FIXED_ARRAY:
        if is_record(a):
            cls = type(a)
            return Shape(Kind.RECORD, cls.__name__, fields=record_fields(cls))
        _check_fixed_length(a, b, shape, path)
    return shape


def _check_fixed_length(a: tuple, b: tuple, shape: Shape,
                        path: Optional[str]) -> None:
    # The length of a fixed array is part of its type.
    if len(a) != len(b) or (shape.items and len(shape.items) != len(a)):
        raise TypeMismatchError(
            f"fixed array length mismatch: A has {len(a)}, B has {len(b)}", path
        )


def resolve_dynamic(a: Any, b: Any, path: Optional[str] = None) -> tuple[Any, int]:
    """
    Concrete declared type of a dynamic payload, plus the extra depth
    its descent costs.

    Inspection order is str, number, bool, list, dict.  Lists and maps
    cost one extra level of depth; leaves cost nothing.
    """
    if isinstance(a, str):
        return str, 0
    if _is_number(a):
        return NUMBER, 0
    if isinstance(a, bool):
        return bool, 0
    if isinstance(a, list):
        return list[Any], 1
    if isinstance(a, dict):
        return dict[Any, Any], 1
    raise UnsupportedValueError(
        f"unexpected dynamic value of type {type(a).__name__}", path
    )
