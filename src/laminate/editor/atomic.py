"""Crash-safe file replacement.

A write is split into two steps so that several files can be prepared before
any of them is replaced:

- :func:`stage_text` writes the content to a hidden temporary file next to the
  target, then flushes and fsyncs it.
- :func:`commit` renames the temporary file over the target.

The target is either fully replaced or left untouched.
"""

from __future__ import annotations

import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


def stage_text(path: Path, text: str, encoding: str = "utf-8") -> Path:
    """Write ``text`` to a temporary file in ``path``'s directory.

    Returns:
        Path of the temporary file. The caller must :func:`commit` or
        :func:`discard` it.

    Raises:
        OSError: If the temporary file cannot be written. No temporary file
            is left behind.
    """
    path = Path(path)
    tmp_path: Optional[Path] = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding=encoding,
            dir=str(path.parent),
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as f:
            tmp_path = Path(f.name)
            os.chmod(f.name, _target_mode(path))
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
    except BaseException:
        if tmp_path is not None:
            discard(tmp_path)
        raise
    return tmp_path


def _target_mode(path: Path) -> int:
    """Permission bits the replacement file should carry.

    An existing file keeps its mode; a new one gets the umask default.
    """
    try:
        return stat.S_IMODE(os.stat(path).st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def commit(tmp_path: Path, path: Path) -> None:
    """Atomically move a staged file over ``path``."""
    try:
        os.replace(str(tmp_path), str(path))
    except BaseException:
        discard(tmp_path)
        raise


def discard(tmp_path: Path) -> None:
    """Remove a staged file that will not be committed."""
    try:
        tmp_path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("could not remove temporary file %s: %s", tmp_path, e)
