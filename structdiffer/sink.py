"""
structdiffer.sink — Path-filtered accumulation of differences.

The sink owns every Diff found during a session, keyed by field path.
Filtering happens at insertion time and its mode is derived from what
is configured, never stored:

    include patterns present  → keep only paths matching one of them
    exclude patterns present  → drop paths matching any of them
    neither                   → keep everything

Once include patterns exist the exclude patterns are inert.

Storage is insertion-ordered so rendering is deterministic.  Two
insertions at one path keep the LAST value, at the position of the
first insertion.
"""

import re
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Optional

from .errors import ConfigurationError
from .formats import DEFAULT_TEMPLATE, render_diff


@dataclass
class Diff:
    """One disagreement between A and B at a field path."""
    path: str
    a: Any
    b: Any

    def render(self, template: str = DEFAULT_TEMPLATE) -> str:
        return render_diff(template, self.path, self.a, self.b)

    def __str__(self) -> str:
        return self.render()


def compile_patterns(patterns: Iterable[str]) -> list[re.Pattern]:
    """Compile path patterns, turning re.error into ConfigurationError."""
    compiled = []
    for expr in patterns:
        try:
            compiled.append(re.compile(expr))
        except re.error as exc:
            raise ConfigurationError(f"invalid path pattern {expr!r}: {exc}") from exc
    return compiled


def matches_any(patterns: Iterable[re.Pattern], path: str) -> bool:
    return any(p.search(path) for p in patterns)


class DiffSink:
    """Insertion-ordered, filter-aware store of Diffs."""

    def __init__(self):
        self._diffs: dict[str, Diff] = {}
        self.includes: list[re.Pattern] = []
        self.excludes: list[re.Pattern] = []

    # ── filtering ──────────────────────────────────────────────────

    def set_includes(self, patterns: Iterable[str]) -> None:
        self.includes = compile_patterns(patterns)

    def set_excludes(self, patterns: Iterable[str]) -> None:
        if self.includes:
            return
        self.excludes = compile_patterns(patterns)

    def accepts(self, path: str) -> bool:
        """Would a diff at ``path`` be recorded under the current filters?"""
        if self.includes:
            return matches_any(self.includes, path)
        if self.excludes:
            return not matches_any(self.excludes, path)
        return True

    # ── recording ──────────────────────────────────────────────────

    def record(self, path: str, a: Any, b: Any) -> Optional[Diff]:
        """Insert a Diff unless filtered out; returns it, or None if dropped."""
        if not self.accepts(path):
            return None
        df = Diff(path, a, b)
        self._diffs[path] = df
        return df

    # ── queries ────────────────────────────────────────────────────

    def lookup(self, path: str) -> Optional[Diff]:
        return self._diffs.get(path)

    def lookup_by_pattern(self, expr: str) -> list[Diff]:
        """Every Diff whose path matches ``expr`` (searched, not anchored)."""
        (pattern,) = compile_patterns([expr])
        return [df for path, df in self._diffs.items() if pattern.search(path)]

    def all(self) -> list[Diff]:
        return list(self._diffs.values())

    def render(self, template: str = DEFAULT_TEMPLATE) -> str:
        """One line per Diff, each terminated by a newline."""
        return "".join(df.render(template) + "\n" for df in self._diffs.values())

    def clear(self) -> None:
        """Drop recorded Diffs and every filter."""
        self._diffs = {}
        self.includes = []
        self.excludes = []

    def __len__(self) -> int:
        return len(self._diffs)

    def __iter__(self) -> Iterator[Diff]:
        return iter(list(self._diffs.values()))

    def __contains__(self, path: str) -> bool:
        return path in self._diffs
