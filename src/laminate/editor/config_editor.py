"""Provenance-routed editing across every file of a layered configuration."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from ..core.errors import FormatMismatchError, InvalidPathError, KeyNotFoundError
from ..core.paths import absolutize
from ..core.provenance import SourceMap
from . import atomic
from .base import LayerEditor
from .factory import create_editor, open_editor
from .format import ConfigFormat

logger = logging.getLogger(__name__)


class ConfigEditor:
    """Edits configuration keys in the files they came from.

    The source map from :meth:`LayerBuilder.build_with_provenance` decides
    which file owns a key. Keys no file owns yet go to the default target.
    Editors are opened lazily, once per file.

    Not safe for concurrent mutation from several threads.

    Example:
        >>> config, sources = builder.build_with_provenance()
        >>> editor = ConfigEditor(sources, default_target="config/local.toml")
        >>> editor.set("database.host", "db.internal")
        >>> editor.save()
    """

    def __init__(
        self,
        source_map: SourceMap,
        default_target: Optional[Union[str, Path]] = None,
    ):
        self._source_map = source_map
        self._editors: Dict[Path, LayerEditor] = {}
        self._added: Dict[str, Path] = {}
        self._default_target: Optional[Path] = None
        if default_target is not None:
            self.set_default_target(default_target)

    @property
    def source_map(self) -> SourceMap:
        return self._source_map

    @property
    def default_target(self) -> Optional[Path]:
        return self._default_target

    def set_default_target(self, path: Union[str, Path]) -> None:
        """File that receives keys not present in the source map."""
        self._default_target = absolutize(path)

    def editor_for(self, path: Union[str, Path]) -> LayerEditor:
        """Open, or reuse, the editor for an existing file."""
        path = absolutize(path)
        editor = self._editors.get(path)
        if editor is None:
            editor = open_editor(path)
            self._editors[path] = editor
        return editor

    def get(self, key: str, expected: Optional[type] = None) -> Optional[Any]:
        """Read a key from the file that owns it.

        Returns None for unknown keys and for keys that do not come from a
        file (environment variables, for example).
        """
        path = self._owning_file(key)
        if path is None:
            return None
        return self.editor_for(path).get(key, expected)

    def set(self, key: str, value: Any) -> None:
        """Set a key in the file that owns it, or in the default target.

        Raises:
            KeyNotFoundError: If the key is unknown and there is no default
                target.
            InvalidPathError: If the key comes from a source that is not a
                file.
        """
        path = self._owning_file(key)
        if path is not None:
            self.editor_for(path).set(key, value)
            return

        self._check_editable(key)
        if self._default_target is None:
            raise KeyNotFoundError(key, f"Key not found: {key} (no default target configured)")
        editor = self._default_editor()
        editor.set(key, value)
        self._added[key] = editor.path
        logger.debug("new key %s routed to %s", key, editor.path)

    def unset(self, key: str) -> None:
        """Remove a key from the file that owns it.

        Raises:
            KeyNotFoundError: If no file owns the key.
            InvalidPathError: If the key comes from a source that is not a
                file.
        """
        path = self._owning_file(key)
        if path is None:
            self._check_editable(key)
            raise KeyNotFoundError(key)
        self.editor_for(path).unset(key)
        self._added.pop(key, None)

    def save(self) -> None:
        """Write every dirty file.

        All files are staged before any of them is replaced. If staging
        fails nothing on disk changes. If a rename fails, files already
        renamed stay written and the rest stay dirty.

        Raises:
            EditorIOError: If a file cannot be written.
        """
        dirty = [editor for editor in self._editors.values() if editor.is_dirty()]
        staged: List[Tuple[LayerEditor, Tuple[Path, int]]] = []
        try:
            for editor in dirty:
                staged.append((editor, editor.stage()))
        except BaseException:
            logger.warning("save aborted, discarding %d staged file(s)", len(staged))
            for _, (tmp_path, _) in staged:
                atomic.discard(tmp_path)
            raise

        for position, (editor, token) in enumerate(staged):
            try:
                editor.commit(token)
            except BaseException:
                remaining = staged[position + 1 :]
                logger.warning(
                    "save of %s failed, %d file(s) left unsaved", editor.path, len(remaining)
                )
                for _, (tmp_path, _) in remaining:
                    atomic.discard(tmp_path)
                raise

    def is_dirty(self) -> bool:
        return any(editor.is_dirty() for editor in self._editors.values())

    def dirty_files(self) -> List[Path]:
        return [path for path, editor in self._editors.items() if editor.is_dirty()]

    def _owning_file(self, key: str) -> Optional[Path]:
        metadata = self._source_map.source_of(key)
        if metadata is not None:
            return metadata.path if metadata.is_file else None
        return self._added.get(key)

    def _check_editable(self, key: str) -> None:
        metadata = self._source_map.source_of(key)
        if metadata is not None and not metadata.is_file:
            raise InvalidPathError(
                f"'{key}' comes from {metadata.id}, which is not a file and cannot be edited"
            )

    def _default_editor(self) -> LayerEditor:
        path = self._default_target
        if path in self._editors or path.exists():
            return self.editor_for(path)
        fmt = ConfigFormat.from_path(path)
        if fmt is None:
            raise FormatMismatchError(path)
        editor = create_editor(path, fmt)
        self._editors[path] = editor
        return editor
