"""Merging logic for ordered configuration layers."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any, Dict, Iterable, Optional, Tuple

from .paths import join_key
from .provenance import SourceMap
from .types import SourceMetadata


def merge_layers(
    layers: Iterable[Tuple[SourceMetadata, Mapping]],
    source_map: Optional[SourceMap] = None,
) -> Tuple[Dict[str, Any], SourceMap]:
    """Merge layer payloads in order, later layers overriding earlier ones.

    Mappings merge key by key; scalars and lists are replaced wholesale.
    Provenance is recorded in the same traversal, so the source map always
    agrees with the merged data.

    Args:
        layers: ``(metadata, payload)`` pairs, lowest precedence first.
        source_map: Map to record into. A new one is created if omitted.

    Returns:
        Tuple of (merged_config, source_map).
    """
    merged: Dict[str, Any] = {}
    provenance = source_map if source_map is not None else SourceMap()
    for metadata, payload in layers:
        merge_into(merged, payload, metadata, provenance)
    return merged, provenance


def merge_into(
    target: Dict[str, Any],
    payload: Mapping,
    metadata: SourceMetadata,
    source_map: SourceMap,
    parent: str = "",
) -> None:
    for key, value in payload.items():
        key = str(key)
        dotted = join_key(parent, key)
        existing = target.get(key)
        if isinstance(value, Mapping):
            if not isinstance(existing, Mapping):
                # a scalar (or nothing) is replaced by a branch
                source_map.discard_branch(dotted)
                existing = {}
                target[key] = existing
            merge_into(existing, value, metadata, source_map, dotted)
        else:
            source_map.discard_branch(dotted)
            target[key] = copy.deepcopy(value)
            source_map.insert(dotted, metadata)
