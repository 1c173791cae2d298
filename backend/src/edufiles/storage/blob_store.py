# src/edufiles/storage/blob_store.py
import logging
import re
from pathlib import Path
from typing import BinaryIO, Iterator

from edufiles.common.filesystem import BUFFER_SIZE, atomic_write, ensure_dir
from edufiles.errors import NotFound, WriteFailure

log = logging.getLogger(__name__)

# Storage ids are generated server-side; anything else is refused
_STORAGE_ID = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]{0,254}$")


def is_valid_storage_id(storage_id: str) -> bool:
    return bool(_STORAGE_ID.match(storage_id or "")) and ".." not in storage_id


class BlobStore:
    """
    Raw file bytes on local disk, one file per storage id, flat under root.

    The root directory is created lazily on first write. Blobs are written
    once and never modified in place.
    """

    def __init__(self, root: Path):
        self.root = Path(root)

    def _path(self, storage_id: str) -> Path:
        if not is_valid_storage_id(storage_id):
            raise NotFound(detail=f"Invalid storage id: {storage_id!r}")
        return self.root / storage_id

    # -------------------------
    # Write
    # -------------------------
    def put(self, storage_id: str, stream: BinaryIO) -> None:
        if not is_valid_storage_id(storage_id):
            raise ValueError(f"Invalid storage id: {storage_id!r}")

        path = self.root / storage_id
        try:
            ensure_dir(self.root)
        except OSError as exc:
            log.error("Storage root unusable %s: %s", self.root, exc)
            raise WriteFailure(detail=str(exc)) from exc

        try:
            size = atomic_write(stream, path)
        except FileExistsError as exc:
            raise WriteFailure(detail=f"Blob already exists: {storage_id}") from exc
        except OSError as exc:
            log.error("Blob write failed id=%s: %s", storage_id, exc)
            raise WriteFailure(detail=str(exc)) from exc

        log.info("Stored blob id=%s size=%s", storage_id, size)

    # -------------------------
    # Read
    # -------------------------
    def exists(self, storage_id: str) -> bool:
        if not is_valid_storage_id(storage_id):
            return False
        return (self.root / storage_id).is_file()

    def size(self, storage_id: str) -> int:
        path = self._path(storage_id)
        try:
            return path.stat().st_size
        except FileNotFoundError:
            raise NotFound(detail=storage_id)

    def open_read(self, storage_id: str) -> BinaryIO:
        path = self._path(storage_id)
        try:
            return path.open("rb")
        except (FileNotFoundError, IsADirectoryError):
            raise NotFound(detail=storage_id)

    def iter_chunks(self, storage_id: str, chunk_size: int = BUFFER_SIZE) -> "ChunkReader":
        """
        Open the blob now (NotFound raises here, before any bytes are sent)
        and return an iterator that reads it chunk by chunk.
        The handle is closed on exhaustion or on close(), whichever comes first.
        """
        return ChunkReader(self.open_read(storage_id), chunk_size)

    # -------------------------
    # Delete
    # -------------------------
    def delete(self, storage_id: str) -> None:
        path = self._path(storage_id)
        try:
            path.unlink()
        except FileNotFoundError:
            raise NotFound(detail=storage_id)
        log.info("Deleted blob id=%s", storage_id)


class ChunkReader:
    """Iterates a file handle in fixed-size chunks; close() is idempotent."""

    def __init__(self, fh: BinaryIO, chunk_size: int = BUFFER_SIZE):
        self.fh = fh
        self.chunk_size = chunk_size

    def __iter__(self) -> Iterator[bytes]:
        return self

    def __next__(self) -> bytes:
        if self.fh.closed:
            raise StopIteration
        chunk = self.fh.read(self.chunk_size)
        if not chunk:
            self.close()
            raise StopIteration
        return chunk

    @property
    def closed(self) -> bool:
        return self.fh.closed

    def close(self) -> None:
        self.fh.close()
