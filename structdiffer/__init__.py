"""
Structural Difference Engine
============================

Deep equality with reportable detail: walk two values of the same
shape in lockstep and list every leaf position where they disagree.

    Differ().compare(Person("Alice", 30), Person("Bob", 30)).diffs()
        → [Diff(path='Person.Name', a='Alice', b='Bob')]

    Differ().compare([1, 2, 3], [1, 2]).diffs()
        → [Diff(path='$[Length]', a=3, b=2)]

    Differ().compare({"x": 1}, {"x": 2, "y": 3}).diffs()
        → [Diff('$[Length]', 1, 2), Diff('$[x]', 1, 2),
           Diff('$[y]', '<nil>', '<not nil>')]

Records (dataclasses, NamedTuples), sequences, fixed tuples, maps,
optionals and dynamic JSON-like payloads are all walked; every
position is addressed by a field path that filters, comparators,
sorters and trim rules match against with regular expressions.
"""

from structdiffer.core import (
    DEFAULT_MAX_DEPTH,
    Comparator,
    Differ,
    DiffType,
    RegexComparator,
    RegexSorter,
    Sorter,
)
from structdiffer.errors import (
    ConfigurationError,
    DepthExceededError,
    DifferError,
    InvalidValueError,
    ProtocolViolationError,
    TypeMismatchError,
    UnsupportedValueError,
)
from structdiffer.formats import DEFAULT_TEMPLATE
from structdiffer.sink import Diff, DiffSink
from structdiffer.testing import assert_no_diff
from structdiffer.values import Kind, Shape, resolve

__version__ = "0.1.0"
__all__ = [
    "Differ", "Diff", "DiffSink", "DiffType",
    "Comparator", "RegexComparator", "Sorter", "RegexSorter",
    "DEFAULT_MAX_DEPTH", "DEFAULT_TEMPLATE",
    "DifferError", "TypeMismatchError", "DepthExceededError",
    "InvalidValueError", "UnsupportedValueError",
    "ProtocolViolationError", "ConfigurationError",
    "Kind", "Shape", "resolve",
    "assert_no_diff",
]
