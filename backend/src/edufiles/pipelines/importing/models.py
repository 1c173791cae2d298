# src/edufiles/pipelines/importing/models.py
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from edufiles.errors import MissingImportType, UnsupportedImportType

Row = dict[str, Any]


class ImportType(str, Enum):
    STUDENTS = "students"
    SCORES = "scores"
    ATTENDANCE = "attendance"

    @classmethod
    def parse(cls, value: "str | ImportType | None") -> "ImportType":
        """Exact, case-sensitive match; blank counts as missing."""
        if isinstance(value, cls):
            return value
        if value is None or not str(value).strip():
            raise MissingImportType()
        try:
            return cls(value)
        except ValueError:
            raise UnsupportedImportType(detail=str(value))


# ======================================================
# Per-row outcome
# ======================================================

@dataclass(frozen=True)
class RowAccepted:
    record: Row


@dataclass(frozen=True)
class RowRejected:
    reason: str


RowOutcome = RowAccepted | RowRejected


# ======================================================
# Report (immutable, grown one row at a time)
# ======================================================

@dataclass(frozen=True)
class ImportReport:
    total_rows: int = 0
    success_count: int = 0
    error_count: int = 0
    errors: tuple[str, ...] = field(default_factory=tuple)

    def with_success(self) -> "ImportReport":
        return replace(self, success_count=self.success_count + 1)

    def with_error(self, message: str) -> "ImportReport":
        return replace(
            self,
            error_count=self.error_count + 1,
            errors=self.errors + (message,),
        )

