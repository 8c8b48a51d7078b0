"""File I/O operations for rendering."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from ..core.errors import WriteResultError

logger = logging.getLogger(__name__)


def ensure_parent(path: Path) -> None:
    """Ensure parent directories exist for the given path.

    Args:
        path: Path whose parent directories should be created
    """
    path.parent.mkdir(parents=True, exist_ok=True)


def read_existing(path: Path) -> bytes | None:
    """Return the current content of ``path``, or None if it cannot be read."""
    try:
        return path.read_bytes()
    except OSError:
        return None


def atomic_write_bytes(path: Path, data: bytes, mode: int = 0o644) -> None:
    """Write bytes to a file atomically using a temporary file.

    Args:
        path: Destination file path
        data: Content to write
        mode: File permissions (octal)
    """
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    try:
        with os.fdopen(fd, "wb") as tmp:
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    finally:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)


def write_output(path: Path, data: bytes, mode: int = 0o644) -> None:
    """Write ``data`` to ``path``, falling back to a direct write.

    The atomic rename can fail where a temporary file cannot be created or
    moved next to the destination; the plain write is then tried before
    giving up.

    Args:
        path: Destination file path
        data: Content to write
        mode: File permissions (octal)
    """
    try:
        ensure_parent(path)
    except OSError as exc:
        raise WriteResultError(path, str(exc)) from exc

    try:
        atomic_write_bytes(path, data, mode=mode)
        return
    except OSError as exc:
        logger.debug(f"Atomic write of {path} failed ({exc}); writing directly")

    try:
        path.write_bytes(data)
    except OSError as exc:
        raise WriteResultError(path, str(exc)) from exc

    try:
        os.chmod(path, mode)
    except OSError as exc:
        logger.debug(f"Could not set mode {mode:o} on {path}: {exc}")
