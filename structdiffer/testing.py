"""
structdiffer.testing — Assertion helpers for test suites.

    def test_order_roundtrip():
        assert_no_diff(expected, load_order(), Differ().ignore(r"\.Id$"))
"""

from typing import Any, Optional

from .core import Differ
from .values import UNDECLARED


def assert_no_diff(a: Any, b: Any, differ: Optional[Differ] = None,
                   declared: Any = UNDECLARED) -> Differ:
    """
    Compare ``a`` and ``b`` and fail with the rendered Diffs if they
    disagree anywhere.  Fatal structural errors propagate unchanged.
    """
    if differ is None:
        differ = Differ()
    differ.compare(a, b, declared=declared)
    if len(differ):
        raise AssertionError(
            f"{len(differ)} difference(s) found:\n{differ.render()}"
        )
    return differ
