"""Environment variables as a configuration source."""

from __future__ import annotations

import os
from typing import Any, Dict, Mapping, Optional


def parse_value(raw: str) -> Any:
    """Best-effort typing of an environment value: bool, int, float, else str."""
    lowered = raw.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if not any(ch.isdigit() for ch in raw):
        # keeps "nan", "inf" and friends as strings
        return raw
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        return float(raw)
    except ValueError:
        return raw


def read_env_vars(
    prefix: str,
    separator: str = "__",
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """Collect ``<PREFIX><sep>...`` variables into a nested dictionary.

    The prefix is matched case-insensitively, keys are lower-cased and split
    on the separator: with prefix ``APP`` and separator ``__``,
    ``APP__DB__HOST=x`` becomes ``{"db": {"host": "x"}}``.

    Args:
        prefix: Variable namespace. An empty prefix takes every variable.
        separator: Nesting separator, also used between prefix and key.
        environ: Variables to read; defaults to ``os.environ``.
    """
    source = os.environ if environ is None else environ
    pattern = f"{prefix}{separator}".lower() if prefix else ""
    result: Dict[str, Any] = {}
    for name in sorted(source):
        lowered = name.lower()
        if pattern and not lowered.startswith(pattern):
            continue
        rest = lowered[len(pattern):]
        if not rest:
            continue
        parts = rest.split(separator.lower()) if separator else [rest]
        if any(not part for part in parts):
            continue
        node = result
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[parts[-1]] = parse_value(source[name])
    return result
