from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .paths import iter_leaves, lookup


@dataclass
class Config:
    """Merged configuration produced by a :class:`LayerBuilder`.

    Values are stored nested; dotted keys address nested entries.
    """

    data: Dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        return lookup(self.data, key, default)

    def values(self) -> Dict[str, Any]:
        """Flattened view: dotted leaf key -> value."""
        return dict(iter_leaves(self.data))

    def as_dict(self) -> Dict[str, Any]:
        return copy.deepcopy(self.data)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        sentinel = object()
        return lookup(self.data, key, sentinel) is not sentinel

    def __getitem__(self, key: str) -> Any:
        sentinel = object()
        value = lookup(self.data, key, sentinel)
        if value is sentinel:
            raise KeyError(key)
        return value
