"""
structdiffer.formats — Field paths and diff rendering.

Field paths are plain strings built while walking:

    root      the declared type's name, or "$" when it has none
    record    + ".<field>"
    sequence  + "[<index>]"
    map       + "[<key>]"           (key rendered with str())

Diffs are rendered through a ``str.format`` template with exactly
three positional slots: path, A's value, B's value.
"""

import string
from typing import Any

from .errors import ConfigurationError


ROOT = "$"
NIL = "<nil>"
NOT_NIL = "<not nil>"
LENGTH_SUFFIX = "[Length]"
CUSTOMIZED_SUFFIX = ".$[customized]"

DEFAULT_TEMPLATE = 'Field: "{}", A: {!r}, B: {!r}'


# ═══════════════════════════════════════════════════════════════════
#  FIELD PATHS
# ═══════════════════════════════════════════════════════════════════

def root_path(name: str) -> str:
    """Starting path: the declared type's name, or ROOT when anonymous."""
    return name if name and name.strip() else ROOT


def field_path(path: str, name: str) -> str:
    return f"{path}.{name}"


def index_path(path: str, index: int) -> str:
    return f"{path}[{index}]"


def key_path(path: str, key: Any) -> str:
    return f"{path}[{key}]"


def length_path(path: str) -> str:
    return path + LENGTH_SUFFIX


def presence(value: Any) -> str:
    """Render one side of a nullability mismatch."""
    return NIL if value is None else NOT_NIL


# ═══════════════════════════════════════════════════════════════════
#  TEMPLATES
# ═══════════════════════════════════════════════════════════════════

def check_template(template: str) -> str:
    """
    Validate a diff template: exactly three positional ``{}`` slots.

    Named or numbered slots are rejected too, since a Diff only ever
    supplies (path, a, b) positionally.
    """
    try:
        slots = [
            name for _, name, _, _ in string.Formatter().parse(template)
            if name is not None
        ]
    except ValueError as exc:
        raise ConfigurationError(f"malformed template {template!r}: {exc}") from exc
    if len(slots) != 3 or any(slots):
        raise ConfigurationError(
            f"template must have exactly 3 positional slots, got {template!r}"
        )
    return template


def render_diff(template: str, path: str, a: Any, b: Any) -> str:
    return template.format(path, a, b)
