"""Dotted-key helpers shared by the merge engine and the editors."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Iterator, List, Tuple, Union

from .errors import InvalidPathError

SEPARATOR = "."

_MISSING = object()


def split_key(key: str) -> List[str]:
    """Split a dotted key into its segments.

    Raises:
        InvalidPathError: If the key or any of its segments is empty.
    """
    if not key:
        raise InvalidPathError("empty key")
    parts = key.split(SEPARATOR)
    if any(not part for part in parts):
        raise InvalidPathError(f"empty path segment in '{key}'")
    return parts


def join_key(parent: str, key: str) -> str:
    return key if not parent else f"{parent}{SEPARATOR}{key}"


def iter_hierarchical(
    data: Mapping,
    parent: str = "",
) -> Iterator[Tuple[str, Any]]:
    """Walk nested mappings depth first, parents before children.

    Every node is emitted, containers included, so callers can tell a branch
    from a leaf. Lists are leaves.

    Yields:
        Tuples of (dotted_key, value).
    """
    for key, value in data.items():
        full_key = join_key(parent, str(key))
        yield full_key, value
        if isinstance(value, Mapping):
            yield from iter_hierarchical(value, full_key)


def iter_leaves(data: Mapping, parent: str = "") -> Iterator[Tuple[str, Any]]:
    """Flatten nested mappings into dotted leaf keys.

    Empty mappings produce nothing.
    """
    for key, value in iter_hierarchical(data, parent):
        if not isinstance(value, Mapping):
            yield key, value


def absolutize(path: Union[str, Path]) -> Path:
    """Absolute, normalized form of a path; symlinks are left alone."""
    return Path(os.path.abspath(os.path.expanduser(str(path))))


def lookup(data: Any, key: str, default: Any = None) -> Any:
    """Look up a dotted key in nested mappings without raising."""
    if not key:
        return default
    node = data
    for part in key.split(SEPARATOR):
        if not isinstance(node, Mapping):
            return default
        node = node.get(part, _MISSING)
        if node is _MISSING:
            return default
    return node
