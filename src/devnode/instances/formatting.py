"""Display helpers for instance listings."""

from __future__ import annotations

__all__ = ["format_uptime"]

_UNITS: tuple[tuple[str, int, int | None], ...] = (
    # name, seconds per unit, wraps at
    ("day", 86400, None),
    ("hour", 3600, 24),
    ("minute", 60, 60),
    ("second", 1, 60),
)


def format_uptime(seconds: float) -> str:
    """Render a duration for humans.

    Zero components are omitted. Durations under one second read
    "Just started"; negative durations (clock skew) are prefixed "In ".

    Example:
        >>> format_uptime(62)
        '1 minute, 2 seconds'
        >>> format_uptime(-1)
        'In 1 second'
    """
    whole = int(abs(seconds))
    if whole == 0:
        return "Just started"

    parts = []
    for name, size, wrap in _UNITS:
        value = whole // size
        if wrap is not None:
            value %= wrap
        if value:
            parts.append(f"{value} {name}{'' if value == 1 else 's'}")

    formatted = ", ".join(parts)
    return f"In {formatted}" if seconds < 0 else formatted
