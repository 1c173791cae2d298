# src/edufiles/common/filesystem.py
import os
import shutil
import uuid
from pathlib import Path
from typing import BinaryIO

# Copy buffer, also used as the streaming chunk size
BUFFER_SIZE = 64 * 1024


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def atomic_write(src: BinaryIO, dst: Path) -> int:
    """
    Copy a binary stream to dst through a temp file in the same directory,
    then hard-link it into place. Readers never see a half-written file,
    and an existing dst is never replaced: FileExistsError is raised instead.

    Returns the number of bytes written.
    """
    ensure_dir(dst.parent)
    tmp = dst.with_name(f".{dst.name}.{uuid.uuid4().hex}.tmp")
    try:
        with tmp.open("xb") as f_out:
            shutil.copyfileobj(src, f_out, BUFFER_SIZE)
            written = f_out.tell()
        os.link(tmp, dst)
    finally:
        tmp.unlink(missing_ok=True)
    return written
