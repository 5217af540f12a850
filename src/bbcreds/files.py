"""Crash-safe file replacement shared by the config and credential store layers."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Optional


def atomic_write(path: Path, data: str, mode: Optional[int] = None) -> None:
    """Replace *path* with *data* so readers see either the old or the new file.

    The content goes to a temporary file in the same directory, is fsynced,
    and is then renamed over *path* with ``os.replace``.  When *mode* is
    given it is applied to the temporary file before anything is written,
    so a secret never sits on disk with looser permissions.

    Raises:
        OSError: If the file cannot be written.  The temporary file is
            removed and *path* is left untouched.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    handle = tempfile.NamedTemporaryFile(
        mode="w",
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
        encoding="utf-8",
    )
    try:
        with handle:
            if mode is not None:
                os.chmod(handle.name, mode)
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(handle.name, path)
    except BaseException:
        try:
            os.unlink(handle.name)
        except OSError:
            pass
        raise
