"""File helpers shared by every command that rewrites a file."""

import os
import tempfile
from pathlib import Path
from typing import Union


def read_text(path: Union[str, Path]) -> str:
    """Read a UTF-8 text file without newline translation."""
    with open(path, 'r', encoding='utf-8', newline='') as f:
        return f.read()


def atomic_write(path: Union[str, Path], data: str) -> None:
    """
    Atomically replace ``path`` with ``data``.

    The content goes to a temporary file in the target's directory, is
    fsynced, then moved over the target with ``os.replace``. Readers see
    either the old file or the new one, never a partial write. Permission
    bits of an existing target are preserved.

    Raises:
        OSError: If the directory cannot be created or the write fails. The
            original file is left untouched in that case.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    orig_mode = None
    try:
        orig_mode = path.stat().st_mode & 0o777
    except OSError:
        pass

    tmp_name = None
    try:
        with tempfile.NamedTemporaryFile(
            'w', delete=False, dir=path.parent, prefix=f'.{path.name}.',
            suffix='.tmp', encoding='utf-8', newline=''
        ) as tf:
            tmp_name = tf.name
            tf.write(data)
            tf.flush()
            os.fsync(tf.fileno())
        if orig_mode is not None:
            os.chmod(tmp_name, orig_mode)
        os.replace(tmp_name, path)
        tmp_name = None
    finally:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)


def write_if_changed(path: Union[str, Path], data: str) -> bool:
    """
    Write ``data`` atomically unless the file already holds exactly it.

    Returns:
        True if the file was written
    """
    path = Path(path)
    if path.exists():
        try:
            if read_text(path) == data:
                return False
        except UnicodeDecodeError:
            pass
    atomic_write(path, data)
    return True
