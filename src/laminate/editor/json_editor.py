from __future__ import annotations

import copy
import json
from collections.abc import MutableMapping
from typing import Any

from ..core.errors import SerializationError
from .base import LayerEditor
from .format import ConfigFormat


class JsonEditor(LayerEditor):
    """Edits a JSON file as a plain value tree, saved with two-space indent."""

    format = ConfigFormat.JSON
    parse_errors = (json.JSONDecodeError,)

    @classmethod
    def _parse(cls, text: str) -> Any:
        if not text.strip():
            return {}
        return json.loads(text)

    @classmethod
    def _empty(cls) -> MutableMapping:
        return {}

    def _dump(self, document: MutableMapping) -> str:
        return json.dumps(document, indent=2, ensure_ascii=False)

    def _to_node(self, value: Any) -> Any:
        try:
            return json.loads(json.dumps(value, allow_nan=False))
        except (TypeError, ValueError) as e:
            raise SerializationError(f"cannot represent {value!r} in JSON: {e}") from e

    def _plain(self, node: Any) -> Any:
        return copy.deepcopy(node)
