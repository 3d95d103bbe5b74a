"""Source provenance tracking for configuration values.

A :class:`SourceMap` records, for every dotted leaf key of a merged
configuration, the layer that produced the winning value. It answers
"which file do I edit to change this?" for :class:`~laminate.editor.ConfigEditor`
and "why is this value X?" for audits.
"""

from __future__ import annotations

from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional

from .paths import SEPARATOR
from .types import SourceMetadata


class SourceMap:
    """Mapping of dotted key to the metadata of its winning source."""

    def __init__(self, entries: Optional[Mapping[str, SourceMetadata]] = None):
        self._entries: Dict[str, SourceMetadata] = dict(entries or {})

    def insert(self, key: str, metadata: SourceMetadata) -> None:
        """Record the source of a key.

        An existing entry is only replaced by metadata from the same or a
        later layer.
        """
        existing = self._entries.get(key)
        if existing is None or metadata.layer_index >= existing.layer_index:
            self._entries[key] = metadata

    def insert_layer(self, metadata: SourceMetadata, keys: Iterable[str]) -> None:
        for key in keys:
            self.insert(key, metadata)

    def discard_branch(self, key: str) -> None:
        """Drop the entry for ``key`` and every entry nested beneath it."""
        prefix = key + SEPARATOR
        for existing in [k for k in self._entries if k == key or k.startswith(prefix)]:
            del self._entries[existing]

    def source_of(self, key: str) -> Optional[SourceMetadata]:
        return self._entries.get(key)

    @property
    def entries(self) -> Mapping[str, SourceMetadata]:
        return MappingProxyType(self._entries)

    def keys(self) -> List[str]:
        return sorted(self._entries)

    def files(self) -> List[Path]:
        """Distinct file paths referenced by file-backed entries, in layer order."""
        seen: Dict[Path, int] = {}
        for meta in self._entries.values():
            if meta.is_file and meta.path not in seen:
                seen[meta.path] = meta.layer_index
        return sorted(seen, key=lambda p: (seen[p], str(p)))

    def audit_report(self) -> str:
        """Render a sorted, human-readable table of key sources."""
        lines = ["Configuration Audit Report", "==========================", ""]
        for key in self.keys():
            meta = self._entries[key]
            lines.append(f"{key:<30} -> Layer {meta.layer_index}: {meta}")
        return "\n".join(lines) + "\n"

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"SourceMap({len(self._entries)} entries)"
