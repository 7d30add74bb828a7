"""Conversion between nested start configuration and child-process argv.

A detached instance is started by re-invoking the devnode CLI with the
configuration the user asked for. ``flatten_child_args`` turns the nested
configuration into ``--namespace.key=value`` tokens; ``parse_child_args``
folds such tokens back into the nested shape.
"""

from __future__ import annotations

__all__ = [
    "flatten_child_args",
    "parse_child_args",
]

from collections.abc import Mapping, Sequence
from typing import Any

from devnode.constants import ACTION_ARG_KEY, FLAVOR_ARG_KEY


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def flatten_child_args(config: Mapping[str, Any]) -> list[str]:
    """Flatten a nested configuration into argv tokens for a child process.

    Nested mappings become dotted flag names. Two keys are special at any
    depth:

    - ``action`` is dropped; the child is always started, never dispatched.
    - ``flavor`` is emitted as a bare token at the front of the list, since
      the flavor is selected like a sub-command (``devnode start filecoin``).

    ``None`` values are omitted and sequences emit one token per item.

    Args:
        config: Mapping of keys to scalars, sequences or nested mappings.

    Returns:
        Ordered argv tokens, e.g. ``["ethereum", "--server.port=8545"]``.

    Example:
        >>> flatten_child_args({"flavor": "x", "a": {"b": 1}})
        ['x', '--a.b=1']
    """
    tokens: list[str] = []

    def flatten(prefix: str, options: Mapping[str, Any]) -> None:
        for key, value in options.items():
            if key == FLAVOR_ARG_KEY:
                tokens.insert(0, _format_value(value))
            elif key == ACTION_ARG_KEY or value is None:
                continue
            elif isinstance(value, Mapping):
                flatten(f"{prefix}{key}.", value)
            elif isinstance(value, (list, tuple)):
                tokens.extend(f"--{prefix}{key}={_format_value(item)}" for item in value)
            else:
                tokens.append(f"--{prefix}{key}={_format_value(value)}")

    flatten("", config)
    return tokens


def parse_child_args(tokens: Sequence[str]) -> dict[str, Any]:
    """Fold argv tokens produced by flatten_child_args back into a mapping.

    The first bare token becomes ``flavor``. Values are kept as strings;
    a bare ``--flag`` becomes ``"true"`` and repeated flags become lists.

    Raises:
        ValueError: On a second bare token or an empty flag name.
    """
    result: dict[str, Any] = {}

    for token in tokens:
        if not token.startswith("--"):
            if FLAVOR_ARG_KEY in result:
                raise ValueError(f"Unexpected positional argument: {token!r}")
            result[FLAVOR_ARG_KEY] = token
            continue

        name, sep, value = token[2:].partition("=")
        if not name:
            raise ValueError(f"Invalid argument: {token!r}")
        if not sep:
            value = "true"

        *namespaces, key = name.split(".")
        target = result
        for namespace in namespaces:
            target = target.setdefault(namespace, {})

        if key in target:
            existing = target[key]
            target[key] = [*existing, value] if isinstance(existing, list) else [existing, value]
        else:
            target[key] = value

    return result
