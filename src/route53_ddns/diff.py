"""Structural comparison of policy documents and environment mappings."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


def deep_equals(a: Any, b: Any) -> bool:
    """
    Compare two JSON-shaped values structurally.

    Mappings are equal when they have the same key set (order ignored) and
    pairwise equal values. Lists and tuples compare element-wise by position.
    Everything else compares by value. ``None`` is only equal to ``None``, so
    an absent document never matches an empty one.

    Unlike ``==``, a mapping never equals a sequence and ``True`` never
    equals ``1``.
    """
    if a is None or b is None:
        return a is b
    if isinstance(a, Mapping) or isinstance(b, Mapping):
        if not (isinstance(a, Mapping) and isinstance(b, Mapping)):
            return False
        if set(a.keys()) != set(b.keys()):
            return False
        return all(deep_equals(a[key], b[key]) for key in a)
    if isinstance(a, (list, tuple)) or isinstance(b, (list, tuple)):
        if not (isinstance(a, (list, tuple)) and isinstance(b, (list, tuple))):
            return False
        return len(a) == len(b) and all(deep_equals(x, y) for x, y in zip(a, b))
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    return bool(a == b)


def changed_keys(
    desired: Mapping[str, str],
    observed: Mapping[str, str] | None,
) -> list[tuple[str, str, str | None]]:
    """
    List the desired entries that the observed mapping does not match.

    Keys present only in ``observed`` are ignored.

    Returns:
        ``(key, desired_value, observed_value)`` tuples in desired key order;
        ``observed_value`` is None when the key is missing.
    """
    observed = observed or {}
    return [
        (key, expected, observed.get(key))
        for key, expected in desired.items()
        if observed.get(key) != expected
    ]
