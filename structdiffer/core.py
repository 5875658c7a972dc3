"""
structdiffer.core — Structural Difference Engine
================================================

    differ = Differ().ignore(r"\.UpdatedAt$").compare(expected, actual)
    for df in differ.diffs():
        print(df)

§1  WHAT IT DOES
────────────────

Given two values of the same declared type, walk both in lockstep and
report every leaf position where they disagree, addressed by a field
path such as ``Order.Items[2].Sku`` or ``$[config][port]``.

Only genuine disagreements become Diffs:

    • leaf inequality                      Diff(path, a, b)
    • sequence / map length mismatch       Diff(path + "[Length]", len(a), len(b))
    • one side None, the other not         Diff(path, "<nil>", "<not nil>")

Anything structurally anomalous (different types at one position, a
field that was never set, an unknown dynamic payload, a comparator
breaking its contract, a walk deeper than ``max_depth``) raises and
aborts the whole comparison.  See structdiffer.errors.


§2  THE WALK
────────────

At every position, in order:

    1. depth guard        depth > max_depth → DepthExceededError
    2. validity guard     an unset record field → InvalidValueError
    3. type guard         resolve the shared Shape, or TypeMismatchError
    4. comparator         first comparator matching the path replaces
                          descent entirely (path gets ".$[customized]")
    5. descent by kind:

        FIXED_ARRAY   index by index over the shared length
        SEQUENCE      length diff, identity short-circuit, optional
                      sort of deep copies, then index by index over
                      the overlapping prefix (+1 depth when undeclared)
        DYNAMIC       presence check, then re-enter as the concrete
                      runtime kind (lists and maps cost one extra
                      depth level)
        NULLABLE      presence check, identity short-circuit, then the
                      referent at the same path and depth
        RECORD        field by field, depth + 1
        MAP           length diff, then A's keys followed by B-only
                      keys (+1 depth when undeclared); a key missing
                      on one side is compared against absence
        TEXT          cutset trim rule, else trim-space rule, then ==
        SCALAR        ==

Depth grows through records, dynamic lists and maps, and lists or dicts
with no declared type, so self-referential containers hit the limit.
Declared sequences and maps (``list[Item]``, ``dict[str, Item]``) add
nothing of their own.


§3  CONFIGURATION
─────────────────

All builder methods return the Differ so they chain.  Results
accumulate across ``compare`` calls until ``reset()``, which also drops
every filter, comparator, sorter and trim rule but keeps ``max_depth``
and the template.
"""

import copy
import functools
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable, Optional

from .errors import (
    DepthExceededError,
    InvalidValueError,
    ProtocolViolationError,
    TypeMismatchError,
)
from .formats import (
    CUSTOMIZED_SUFFIX,
    DEFAULT_TEMPLATE,
    NIL,
    check_template,
    field_path,
    index_path,
    key_path,
    length_path,
    presence,
    root_path,
)
from .sink import Diff, DiffSink, compile_patterns
from .values import (
    MISSING,
    UNDECLARED,
    Kind,
    Shape,
    field_value,
    resolve,
    resolve_dynamic,
    type_name,
)


DEFAULT_MAX_DEPTH = 30


# ═══════════════════════════════════════════════════════════════════
#  COMPARATORS
# ═══════════════════════════════════════════════════════════════════

class DiffType(Enum):
    """Outcome of a custom comparator."""
    NO_DIFF = auto()       # Equal, nothing recorded
    LENGTH_DIFF = auto()   # Record len(a) vs len(b) at path[Length]
    NIL_DIFF = auto()      # Record presence of a vs presence of b
    ELEM_DIFF = auto()     # Record the comparator's own renderings


class Comparator:
    """
    Replaces structural descent for the paths it matches.

    Subclasses implement ``match(path)`` and ``equals(a, b)``.
    ``equals`` returns a DiffType, or a ``(DiffType, a_render,
    b_render)`` triple; the renderings are only used for ELEM_DIFF.
    """

    def match(self, path: str) -> bool:
        raise NotImplementedError

    def equals(self, a: Any, b: Any):
        raise NotImplementedError


class RegexComparator(Comparator):
    """Comparator bound to a path pattern and a plain function."""

    def __init__(self, pattern: str, equals: Callable[[Any, Any], Any]):
        (self.pattern,) = compile_patterns([pattern])
        self._equals = equals

    def match(self, path: str) -> bool:
        return self.pattern.search(path) is not None

    def equals(self, a: Any, b: Any):
        return self._equals(a, b)

    def __repr__(self) -> str:
        return f"RegexComparator({self.pattern.pattern!r})"


# ═══════════════════════════════════════════════════════════════════
#  SORTERS
# ═══════════════════════════════════════════════════════════════════

class Sorter:
    """
    Reorders both sides of a matched sequence before descent, so that
    element order stops mattering.

    Subclasses implement ``match(path)`` and ``less(x, y)``.  Sorting
    is stable and always happens on deep copies.
    """

    def match(self, path: str) -> bool:
        raise NotImplementedError

    def less(self, x: Any, y: Any) -> bool:
        raise NotImplementedError

    def _cmp(self, x: Any, y: Any) -> int:
        if self.less(x, y):
            return -1
        if self.less(y, x):
            return 1
        return 0

    def sort(self, items: list) -> list:
        return sorted(items, key=functools.cmp_to_key(self._cmp))


class RegexSorter(Sorter):
    """
    Sorter bound to a path pattern and either a ``less(x, y)`` predicate
    or a ``key(x)`` function.
    """

    def __init__(self, pattern: str,
                 less: Optional[Callable[[Any, Any], bool]] = None,
                 key: Optional[Callable[[Any], Any]] = None):
        if (less is None) == (key is None):
            raise TypeError("RegexSorter needs exactly one of less= or key=")
        (self.pattern,) = compile_patterns([pattern])
        self._less = less
        self._key = key

    def match(self, path: str) -> bool:
        return self.pattern.search(path) is not None

    def less(self, x: Any, y: Any) -> bool:
        if self._key is not None:
            return self._key(x) < self._key(y)
        return self._less(x, y)

    def sort(self, items: list) -> list:
        if self._key is not None:
            return sorted(items, key=self._key)
        return super().sort(items)

    def __repr__(self) -> str:
        return f"RegexSorter({self.pattern.pattern!r})"


# ═══════════════════════════════════════════════════════════════════
#  TRIM RULES
# ═══════════════════════════════════════════════════════════════════

@dataclass
class TrimRule:
    """Strip ``cutset`` characters from both ends of matched strings."""
    pattern: Any
    cutset: Optional[str] = None   # None strips whitespace

    def trim(self, s: str) -> str:
        return s.strip(self.cutset)


# ═══════════════════════════════════════════════════════════════════
#  DIFFER
# ═══════════════════════════════════════════════════════════════════

class Differ:
    """
    A diff session: configuration plus the Diffs it has accumulated.

    Not thread-safe; use one Differ per concurrent comparison.
    """

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH,
                 template: str = DEFAULT_TEMPLATE):
        self.max_depth = max_depth
        self.template = check_template(template)
        self._sink = DiffSink()
        self._comparators: list[Comparator] = []
        self._sorters: list[Sorter] = []
        self._trims: list[TrimRule] = []
        self._trim_spaces: list[TrimRule] = []

    # ── configuration ──────────────────────────────────────────────

    def with_max_depth(self, depth: int) -> "Differ":
        """Comparing deeper than ``depth`` raises DepthExceededError."""
        self.max_depth = depth
        return self

    def with_template(self, template: str) -> "Differ":
        """
        Template for rendering, with exactly 3 positional slots, e.g.
        ``'Field: "{}", A: {!r}, B: {!r}'``.
        """
        self.template = check_template(template)
        return self

    def ignore(self, *patterns: str) -> "Differ":
        """Drop diffs at paths matching any pattern.  No-op after includes()."""
        self._sink.set_excludes(patterns)
        return self

    def includes(self, *patterns: str) -> "Differ":
        """Keep only diffs at paths matching a pattern.  Disables ignore()."""
        self._sink.set_includes(patterns)
        return self

    def with_comparator(self, comparator: Comparator) -> "Differ":
        self._comparators.append(comparator)
        return self

    def with_sorter(self, sorter: Sorter) -> "Differ":
        self._sorters.append(sorter)
        return self

    def with_trim(self, path_pattern: str, cutset: str) -> "Differ":
        (pattern,) = compile_patterns([path_pattern])
        self._trims.append(TrimRule(pattern, cutset))
        return self

    def with_trim_space(self, *path_patterns: str) -> "Differ":
        for pattern in compile_patterns(path_patterns):
            self._trim_spaces.append(TrimRule(pattern))
        return self

    def reset(self) -> "Differ":
        """Forget results and all filters/comparators/sorters/trims."""
        self._sink.clear()
        self._comparators = []
        self._sorters = []
        self._trims = []
        self._trim_spaces = []
        return self

    # ── queries ────────────────────────────────────────────────────

    def find_diff(self, path: str) -> Optional[Diff]:
        return self._sink.lookup(path)

    def find_diffs(self, pattern: str) -> list[Diff]:
        return self._sink.lookup_by_pattern(pattern)

    def diffs(self) -> list[Diff]:
        return self._sink.all()

    def render(self, template: Optional[str] = None) -> str:
        if template is None:
            template = self.template
        else:
            check_template(template)
        return self._sink.render(template)

    def __str__(self) -> str:
        return self.render()

    def __len__(self) -> int:
        return len(self._sink)

    def __repr__(self) -> str:
        return f"Differ(diffs={len(self._sink)}, max_depth={self.max_depth})"

    # ── comparison ─────────────────────────────────────────────────

    def compare(self, a: Any, b: Any, declared: Any = UNDECLARED) -> "Differ":
        """
        Compare ``a`` and ``b`` and accumulate their Diffs.

        ``declared`` gives the static type both values are meant to
        have (``Optional[Order]``, ``list[Item]``, ``Any``...).  Without
        it the two values must have the identical runtime type.  Passing
        ``declared=None`` declares ``NoneType``: a nullable root.
        """
        if declared is UNDECLARED:
            if type(a) is not type(b):
                raise TypeMismatchError(
                    f"type mismatch: A is {type(a).__name__}, B is {type(b).__name__}"
                )
            name = type_name(type(a))
        else:
            name = type_name(declared)
        self._walk(a, b, root_path(name), 0, declared, self._sink)
        return self

    def _walk(self, a: Any, b: Any, path: str, depth: int,
              declared: Any, sink: DiffSink) -> None:
        if depth > self.max_depth:
            raise DepthExceededError(f"depth {depth} over limit {self.max_depth}", path)
        if a is MISSING or b is MISSING:
            raise InvalidValueError("value invalid: field was never set", path)

        shape = resolve(a, b, declared, path)

        for comparator in self._comparators:
            if comparator.match(path):
                self._apply_comparator(comparator, a, b, path + CUSTOMIZED_SUFFIX, sink)
                return

        kind = shape.kind
        if declared is UNDECLARED and kind in (Kind.SEQUENCE, Kind.MAP):
            # Untyped containers can hold themselves: every level costs depth.
            depth += 1

        if kind is Kind.FIXED_ARRAY:
            for i in range(min(len(a), len(b))):
                item = shape.items[i] if shape.items else UNDECLARED
                self._walk(a[i], b[i], index_path(path, i), depth, item, sink)

        elif kind is Kind.SEQUENCE:
            self._walk_sequence(a, b, path, depth, shape, sink)

        elif kind is Kind.DYNAMIC:
            if (a is None) != (b is None):
                sink.record(path, presence(a), presence(b))
                return
            if a is None:
                return
            concrete, extra = resolve_dynamic(a, b, path)
            self._walk(a, b, path, depth + extra, concrete, sink)

        elif kind is Kind.NULLABLE:
            if (a is None) != (b is None):
                sink.record(path, presence(a), presence(b))
                return
            if a is b:
                return
            self._walk(a, b, path, depth, shape.item, sink)

        elif kind is Kind.RECORD:
            for name, item in shape.fields:
                self._walk(field_value(a, name), field_value(b, name),
                           field_path(path, name), depth + 1, item, sink)

        elif kind is Kind.MAP:
            self._walk_map(a, b, path, depth, shape, sink)

        elif kind is Kind.TEXT:
            ta, tb = self._trim(a, b, path)
            if ta != tb:
                sink.record(path, a, b)

        elif not a == b:
            sink.record(path, a, b)

    def _walk_sequence(self, a, b, path: str, depth: int,
                       shape: Shape, sink: DiffSink) -> None:
        if len(a) != len(b):
            sink.record(length_path(path), len(a), len(b))
        if a is b:
            return
        for sorter in self._sorters:
            if sorter.match(path):
                a = sorter.sort(copy.deepcopy(list(a)))
                b = sorter.sort(copy.deepcopy(list(b)))
                break
        for i in range(min(len(a), len(b))):
            self._walk(a[i], b[i], index_path(path, i), depth, shape.item, sink)

    def _walk_map(self, a, b, path: str, depth: int,
                  shape: Shape, sink: DiffSink) -> None:
        if len(a) != len(b):
            sink.record(length_path(path), len(a), len(b))
        for key, va in a.items():
            if key in b:
                self._walk(va, b[key], key_path(path, key), depth, shape.item, sink)
            elif va is not None:
                sink.record(key_path(path, key), presence(va), NIL)
        for key, vb in b.items():
            if key not in a and vb is not None:
                sink.record(key_path(path, key), NIL, presence(vb))

    def _trim(self, a: str, b: str, path: str) -> tuple[str, str]:
        for rule in self._trims:
            if rule.pattern.search(path):
                return rule.trim(a), rule.trim(b)
        for rule in self._trim_spaces:
            if rule.pattern.search(path):
                return rule.trim(a), rule.trim(b)
        return a, b

    def _apply_comparator(self, comparator: Comparator, a: Any, b: Any,
                          path: str, sink: DiffSink) -> None:
        result = comparator.equals(a, b)
        if isinstance(result, DiffType):
            dt, va, vb = result, a, b
        elif (isinstance(result, tuple) and len(result) == 3
              and isinstance(result[0], DiffType)):
            dt, va, vb = result
        else:
            raise ProtocolViolationError(
                f"{comparator!r} returned {result!r}, expected a DiffType", path
            )

        if dt is DiffType.NO_DIFF:
            return
        if dt is DiffType.LENGTH_DIFF:
            try:
                la, lb = len(a), len(b)
            except TypeError as exc:
                raise ProtocolViolationError(
                    f"{comparator!r} reported LENGTH_DIFF on values without a length",
                    path,
                ) from exc
            sink.record(length_path(path), la, lb)
        elif dt is DiffType.NIL_DIFF:
            sink.record(path, presence(a), presence(b))
        else:
            sink.record(path, va, vb)
