"""
Argument validator — pure pattern check, no state.
"""

from __future__ import annotations

import re


def validate_value(value: str, pattern: str | None) -> bool:
    """Whether ``value`` matches ``pattern`` over its whole length.

    A missing pattern accepts everything. Patterns may carry their own
    ``^``/``$`` anchors; matching is anchored regardless.
    """
    if not pattern:
        return True
    return re.fullmatch(pattern, value) is not None
