"""
Acceptance Policy

- Decides whether a candidate file may be stored
- Rules run in order: type, size, batch count
- No side effects; callers raise Rejected.error themselves
"""

from dataclasses import dataclass

from edufiles.core.config import UploadSettings
from edufiles.errors import (
    NotASpreadsheet,
    TooLarge,
    TooManyFiles,
    UnsupportedType,
    UploadServiceError,
)
from edufiles.uploads.models import Candidate


@dataclass(frozen=True)
class Accepted:
    pass


@dataclass(frozen=True)
class Rejected:
    error: UploadServiceError

    @property
    def reason(self) -> str:
        return self.error.message


Decision = Accepted | Rejected

ACCEPTED = Accepted()


class AcceptancePolicy:

    def __init__(self, settings: UploadSettings):
        self.settings = settings

    def accept(self, candidate: Candidate, batch_size: int = 1) -> Decision:
        if candidate.mime_type not in self.settings.allowed_mime_types:
            return Rejected(UnsupportedType(detail=candidate.mime_type or "unknown"))
        return self._check_size(candidate) or self.check_batch(batch_size)

    def check_batch(self, batch_size: int) -> Decision:
        if batch_size > self.settings.max_files:
            return Rejected(TooManyFiles(
                detail=f"{batch_size} files sent, at most {self.settings.max_files} allowed",
            ))
        return ACCEPTED

    def accept_spreadsheet(self, candidate: Candidate) -> Decision:
        """Narrower gate in front of the import pipeline."""
        if candidate.mime_type not in self.settings.spreadsheet_mime_types:
            return Rejected(NotASpreadsheet(detail=candidate.mime_type or "unknown"))
        return self._check_size(candidate) or ACCEPTED

    def _check_size(self, candidate: Candidate) -> Rejected | None:
        if candidate.size_bytes > self.settings.max_file_size:
            return Rejected(TooLarge(
                detail=f"{candidate.size_bytes} bytes, limit is {self.settings.max_file_size}",
            ))
        return None
