"""Stable identifiers for action kinds.

Every action class carries a string ``kind`` used as the key in the store's
status map and for filtering the event stream. APIs that take a kind accept
the string itself, an action class or an action instance.
"""

from typing import Any

__all__ = ["ActionKind", "action_kind"]


ActionKind = str | type[Any]


def action_kind(kind: Any) -> str:
    """Resolve an action class, action instance or string to its kind."""
    if isinstance(kind, str):
        if not kind:
            raise ValueError("Action kind must not be empty")
        return kind
    if isinstance(name := getattr(kind, "kind", None), str):
        return name
    raise TypeError(f"Cannot resolve an action kind from {kind!r}")
