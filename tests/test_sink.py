"""
Tests for structdiffer.sink — filtered, insertion-ordered diff storage.
"""

import sys
import os

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from structdiffer.errors import ConfigurationError
from structdiffer.sink import Diff, DiffSink


class TestFilterModes:

    def test_unrestricted(self):
        sink = DiffSink()
        sink.record("A.x", 1, 2)
        assert len(sink) == 1

    def test_exclude_mode(self):
        sink = DiffSink()
        sink.set_excludes([r"\.x$"])
        assert sink.record("A.x", 1, 2) is None
        assert sink.record("A.y", 1, 2) == Diff("A.y", 1, 2)
        assert [df.path for df in sink] == ["A.y"]

    def test_include_mode(self):
        sink = DiffSink()
        sink.set_includes([r"\.x$", r"\.z$"])
        sink.record("A.x", 1, 2)
        sink.record("A.y", 1, 2)
        sink.record("A.z", 1, 2)
        assert [df.path for df in sink.all()] == ["A.x", "A.z"]

    def test_excludes_inert_once_includes_set(self):
        sink = DiffSink()
        sink.set_excludes([r"x"])
        sink.set_includes([r"A"])
        sink.set_excludes([r"A"])
        assert sink.accepts("A.x")

    def test_patterns_search_anywhere(self):
        sink = DiffSink()
        sink.set_includes([r"items\[\d+\]"])
        assert sink.accepts("Order.items[3].sku")
        assert not sink.accepts("Order.id")

    def test_invalid_pattern(self):
        with pytest.raises(ConfigurationError):
            DiffSink().set_includes(["a("])


class TestStorage:

    def test_lookup(self):
        sink = DiffSink()
        sink.record("A.x", 1, 2)
        assert sink.lookup("A.x") == Diff("A.x", 1, 2)
        assert sink.lookup("A.y") is None
        assert "A.x" in sink

    def test_lookup_by_pattern(self):
        sink = DiffSink()
        for path in ("A.x", "A.y", "B.x"):
            sink.record(path, 0, 1)
        assert [df.path for df in sink.lookup_by_pattern(r"\.x$")] == ["A.x", "B.x"]

    def test_last_write_wins_in_first_position(self):
        sink = DiffSink()
        sink.record("A.x", 1, 2)
        sink.record("A.y", 1, 2)
        sink.record("A.x", 3, 4)
        assert sink.all() == [Diff("A.x", 3, 4), Diff("A.y", 1, 2)]

    def test_render(self):
        sink = DiffSink()
        sink.record("A.x", 1, "b")
        sink.record("A.y", None, 2)
        assert sink.render("{} {} {}") == "A.x 1 b\nA.y None 2\n"
        assert sink.render() == "Field: \"A.x\", A: 1, B: 'b'\nField: \"A.y\", A: None, B: 2\n"

    def test_render_empty(self):
        assert DiffSink().render() == ""

    def test_clear(self):
        sink = DiffSink()
        sink.set_includes(["x"])
        sink.record("x", 1, 2)
        sink.clear()
        assert len(sink) == 0
        assert sink.includes == []
        assert sink.accepts("anything")

    def test_diff_str(self):
        assert str(Diff("P.n", "a", "b")) == "Field: \"P.n\", A: 'a', B: 'b'"
