"""Common behaviour of the per-file layer editors."""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping, MutableMapping
from pathlib import Path
from typing import Any, List, Optional, Tuple, Type, TypeVar, Union

from ..core.errors import (
    EditorIOError,
    InvalidPathError,
    KeyNotFoundError,
    ParseError,
    TypeMismatchError,
)
from ..core.paths import absolutize, split_key
from . import atomic
from .format import ConfigFormat

logger = logging.getLogger(__name__)

E = TypeVar("E", bound="LayerEditor")

_MISSING = object()

_TYPE_LABELS = {
    bool: "boolean",
    int: "integer",
    float: "float",
    str: "string",
    list: "array",
    dict: "table",
    type(None): "null",
}


def type_label(value_or_type: Any) -> str:
    """Human-readable name of a configuration value type."""
    kind = value_or_type if isinstance(value_or_type, type) else type(value_or_type)
    for candidate, label in _TYPE_LABELS.items():
        if kind is candidate:
            return label
    if issubclass(kind, Mapping):
        return "table"
    return kind.__name__


def coerce(value: Any, expected: Optional[type]) -> Any:
    """Return ``value`` as ``expected``, or None if it is not convertible.

    Integers widen to floats; booleans are never integers.
    """
    if expected is None:
        return value
    if expected is float and isinstance(value, int) and not isinstance(value, bool):
        return float(value)
    if expected is int and isinstance(value, bool):
        return None
    if isinstance(value, expected):
        return value
    return None


def match_key(container: Any, segment: str) -> Any:
    """Key of ``container`` addressed by a dotted-path segment.

    Parsed YAML can hold non-string keys such as ``8080``; the merged view and
    the source map know them by their string form, so that form matches too.
    Returns the sentinel ``_MISSING`` when nothing matches.
    """
    if not isinstance(container, Mapping):
        return _MISSING
    if segment in container:
        return segment
    for existing in container:
        if not isinstance(existing, str) and str(existing) == segment:
            return existing
    return _MISSING


class LayerEditor:
    """Mutable, in-memory document backed by a single configuration file.

    Subclasses supply the format: how text is parsed and dumped, what an
    empty table looks like and how plain Python values become document
    nodes. Everything else (dotted-key traversal, dirty tracking, locking
    and atomic saving) lives here.

    All public methods are safe to call from several threads; the document
    and the dirty flag are guarded by a re-entrant lock.
    """

    format: ConfigFormat
    parse_errors: Tuple[Type[BaseException], ...] = ()

    def __init__(self, path: Path, document: MutableMapping):
        self._path = absolutize(path)
        self._doc = document
        self._dirty = False
        self._revision = 0
        self._lock = threading.RLock()

    @classmethod
    def open(cls: Type[E], path: Union[str, Path]) -> E:
        """Parse an existing file.

        Raises:
            EditorIOError: If the file cannot be read.
            ParseError: If the file is not a valid document of this format.
        """
        path = absolutize(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise EditorIOError(path, e) from e
        try:
            document = cls._parse(text)
        except cls.parse_errors as e:
            raise ParseError(f"{path}: {e}") from e
        if not isinstance(document, MutableMapping):
            raise ParseError(f"{path}: top-level value must be a table, got {type_label(document)}")
        logger.debug("opened %s editor for %s", cls.format, path)
        return cls(path, document)

    @classmethod
    def create(cls: Type[E], path: Union[str, Path]) -> E:
        """Create a new file holding an empty document.

        The file is written straight away, so the returned editor starts out
        clean.

        Raises:
            EditorIOError: If the file cannot be written.
        """
        editor = cls(absolutize(path), cls._empty())
        editor.save()
        logger.debug("created %s file %s", cls.format, editor.path)
        return editor

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str, expected: Optional[type] = None) -> Optional[Any]:
        """Look up a dotted key.

        Args:
            key: Dotted path such as ``database.host``.
            expected: Optional type the value must convert to.

        Returns:
            A plain Python copy of the value, or None if the key is absent or
            the value does not convert to ``expected``.
        """
        try:
            parts = split_key(key)
        except InvalidPathError:
            return None
        with self._lock:
            node = self._find(parts)
            if node is _MISSING:
                return None
            return coerce(self._plain(node), expected)

    def require(self, key: str, expected: type) -> Any:
        """Like :meth:`get`, but raise instead of returning None.

        A key holding null is present; it only passes when ``expected`` is
        ``type(None)``.

        Raises:
            KeyNotFoundError: If the key is absent.
            TypeMismatchError: If the value does not convert to ``expected``.
        """
        with self._lock:
            node = self._find(split_key(key))
            if node is _MISSING:
                raise KeyNotFoundError(key)
            value = self._plain(node)
        converted = coerce(value, expected)
        if converted is None and not isinstance(value, expected):
            raise TypeMismatchError(type_label(expected), type_label(value))
        return converted

    def set(self, key: str, value: Any) -> None:
        """Set a dotted key, creating intermediate tables as needed.

        Raises:
            InvalidPathError: If the key is malformed or an intermediate
                segment holds a scalar.
            SerializationError: If the value cannot be represented.
        """
        parts = split_key(key)
        node_value = self._to_node(value)
        with self._lock:
            node = self._doc
            for part in parts[:-1]:
                existing = match_key(node, part)
                if existing is _MISSING:
                    self._assign(node, part, self._new_table(node))
                    existing = part
                child = node[existing]
                if not isinstance(child, MutableMapping):
                    raise InvalidPathError(f"'{part}' in '{key}' is not a table")
                node = child
            existing = match_key(node, parts[-1])
            self._assign(node, parts[-1] if existing is _MISSING else existing, node_value)
            self._touch()

    def unset(self, key: str) -> None:
        """Remove one leaf. Parents are kept even when left empty.

        Raises:
            InvalidPathError: If the key is malformed or a parent is a scalar.
            KeyNotFoundError: If the key or one of its parents is absent.
        """
        parts = split_key(key)
        with self._lock:
            node: Any = self._doc
            for part in parts[:-1]:
                existing = match_key(node, part)
                if existing is _MISSING:
                    raise KeyNotFoundError(key)
                node = node[existing]
                if not isinstance(node, MutableMapping):
                    raise InvalidPathError(f"'{part}' in '{key}' is not a table")
            existing = match_key(node, parts[-1])
            if existing is _MISSING:
                raise KeyNotFoundError(key)
            del node[existing]
            self._touch()

    def keys(self) -> List[str]:
        """Top-level keys of the document."""
        with self._lock:
            return [str(k) for k in self._doc.keys()]

    def is_dirty(self) -> bool:
        with self._lock:
            return self._dirty

    def save(self) -> None:
        """Atomically write the document to its file.

        The dirty flag is cleared only when the write succeeds.

        Raises:
            EditorIOError: If the file cannot be written; the file on disk
                keeps its previous content.
        """
        with self._lock:
            self.commit(self.stage())

    def stage(self) -> Tuple[Path, int]:
        """Write the document to a temporary file next to its target.

        Returns:
            Token to pass to :meth:`commit`.
        """
        with self._lock:
            text = self._dump(self._doc)
            try:
                return atomic.stage_text(self._path, text), self._revision
            except OSError as e:
                raise EditorIOError(self._path, e) from e

    def commit(self, staged: Tuple[Path, int]) -> None:
        """Move a file prepared by :meth:`stage` over the target."""
        tmp_path, revision = staged
        with self._lock:
            try:
                atomic.commit(tmp_path, self._path)
            except OSError as e:
                raise EditorIOError(self._path, e) from e
            # a later edit keeps the editor dirty
            if revision == self._revision:
                self._dirty = False
            logger.debug("saved %s", self._path)

    def _find(self, parts: List[str]) -> Any:
        node: Any = self._doc
        for part in parts:
            existing = match_key(node, part)
            if existing is _MISSING:
                return _MISSING
            node = node[existing]
        return node

    def _touch(self) -> None:
        self._dirty = True
        self._revision += 1

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self._path)!r}, dirty={self._dirty})"

    # Format hooks

    @classmethod
    def _parse(cls, text: str) -> Any:
        raise NotImplementedError

    @classmethod
    def _empty(cls) -> MutableMapping:
        raise NotImplementedError

    def _dump(self, document: MutableMapping) -> str:
        raise NotImplementedError

    def _new_table(self, parent: MutableMapping) -> MutableMapping:
        return {}

    def _to_node(self, value: Any) -> Any:
        raise NotImplementedError

    def _assign(self, container: MutableMapping, key: str, node: Any) -> None:
        container[key] = node

    def _plain(self, node: Any) -> Any:
        raise NotImplementedError
