"""
Row validators per import type.

Each validator takes one parsed row and returns RowAccepted(record) with the
normalized record, or RowRejected(reason). A malformed value raises
RowValidationError; the pipeline records it against the row.
"""

import math
from typing import Any, Callable, Dict

from edufiles.errors import RowValidationError
from edufiles.pipelines.importing.models import (
    ImportType,
    Row,
    RowAccepted,
    RowOutcome,
    RowRejected,
)

STUDENT_REQUIRED = ("name", "email", "registration_no")
STUDENT_ID_FIELDS = ("registration_no", "student_id")


# ======================================================
# Helpers
# ======================================================

def _blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()


def _clean(value: Any) -> Any:
    if _blank(value):
        return None
    if isinstance(value, str):
        return value.strip()
    # Excel hands integer ids back as floats
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _student_ref(row: Row) -> Dict[str, Any] | None:
    ref = {f: _clean(row.get(f)) for f in STUDENT_ID_FIELDS if not _blank(row.get(f))}
    return ref or None


# ======================================================
# Students
# ======================================================

def validate_student(row: Row) -> RowOutcome:
    if any(_blank(row.get(f)) for f in STUDENT_REQUIRED):
        return RowRejected(f"Missing required fields ({', '.join(STUDENT_REQUIRED)})")

    return RowAccepted({
        "name": _clean(row["name"]),
        "email": _clean(row["email"]),
        "registration_no": _clean(row["registration_no"]),
        "course": _clean(row.get("course")) or "General",
        "gender": _clean(row.get("gender")),
        "phone": _clean(row.get("phone")),
        "status": "Active",
    })


# ======================================================
# Scores
# ======================================================

def validate_score(row: Row) -> RowOutcome:
    ref = _student_ref(row)
    if ref is None or _blank(row.get("score")):
        return RowRejected("Missing required fields (registration_no or student_id, score)")

    raw = row["score"]
    try:
        score = float(raw)
    except (TypeError, ValueError):
        raise RowValidationError(f"Invalid score value {raw!r}")
    if math.isnan(score):
        raise RowValidationError(f"Invalid score value {raw!r}")

    return RowAccepted({
        **ref,
        "subject": _clean(row.get("subject")),
        "term": _clean(row.get("term")),
        "score": score,
    })


# ======================================================
# Attendance
# ======================================================

def validate_attendance(row: Row) -> RowOutcome:
    ref = _student_ref(row)
    if ref is None or _blank(row.get("date")):
        return RowRejected("Missing required fields (registration_no or student_id, date)")

    date = row["date"]
    # pandas Timestamp / datetime → ISO date string
    if hasattr(date, "isoformat"):
        date = date.isoformat()[:10]

    return RowAccepted({
        **ref,
        "date": _clean(date),
        "status": _clean(row.get("status")) or "Present",
    })


VALIDATORS: Dict[ImportType, Callable[[Row], RowOutcome]] = {
    ImportType.STUDENTS: validate_student,
    ImportType.SCORES: validate_score,
    ImportType.ATTENDANCE: validate_attendance,
}
