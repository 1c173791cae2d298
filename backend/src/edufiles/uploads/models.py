# src/edufiles/uploads/models.py
import os
from dataclasses import dataclass
from typing import BinaryIO


@dataclass(frozen=True)
class UploadedFile:
    id: str
    storage_id: str
    original_name: str
    mime_type: str
    size_bytes: int
    owner_id: str
    uploaded_at: str
    access_url: str


@dataclass(frozen=True)
class Candidate:
    """What the acceptance policy looks at."""
    mime_type: str
    size_bytes: int


@dataclass
class IncomingFile:
    """A file as received from the client, not yet validated or stored."""
    filename: str
    content_type: str
    stream: BinaryIO
    size: int

    @classmethod
    def from_stream(
        cls,
        filename: str | None,
        content_type: str | None,
        stream: BinaryIO,
        size: int | None = None,
    ) -> "IncomingFile":
        if size is None:
            size = measure(stream)
        return cls(
            filename=filename or "",
            content_type=(content_type or "").split(";")[0].strip().lower(),
            stream=stream,
            size=size,
        )

    @property
    def candidate(self) -> Candidate:
        return Candidate(mime_type=self.content_type, size_bytes=self.size)


def measure(stream: BinaryIO) -> int:
    """Size of a seekable stream; position is restored to the start."""
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(0)
    return size
