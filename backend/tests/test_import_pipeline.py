import pytest

from edufiles.errors import MissingImportType, UnsupportedImportType
from edufiles.pipelines.importing.models import ImportReport, ImportType
from edufiles.pipelines.importing.pipeline import run_import


def test_students_report():
    rows = [
        {"name": "A", "email": "a@x.com", "registration_no": "R1"},
        {"name": "B"},
    ]
    report = run_import(rows, "students")

    assert report == ImportReport(
        total_rows=2,
        success_count=1,
        error_count=1,
        errors=("Row 2: Missing required fields (name, email, registration_no)",),
    )


def test_student_record_is_normalized():
    seen = []
    rows = [{"name": " Ada ", "email": "ada@x.com", "registration_no": 1001.0, "phone": None, "course": ""}]
    run_import(rows, ImportType.STUDENTS, sink=lambda kind, rec: seen.append(rec))

    assert seen == [{
        "name": "Ada",
        "email": "ada@x.com",
        "registration_no": 1001,
        "course": "General",
        "gender": None,
        "phone": None,
        "status": "Active",
    }]


def test_blank_strings_count_as_missing():
    report = run_import([{"name": "  ", "email": "a@x.com", "registration_no": "R1"}], "students")
    assert report.error_count == 1


def test_unknown_type_fails_before_rows():
    calls = []
    with pytest.raises(UnsupportedImportType):
        run_import([{"name": "A"}], "grades", sink=lambda *a: calls.append(a))
    assert calls == []

    with pytest.raises(MissingImportType):
        run_import([], None)


def test_sink_error_is_counted_per_row():
    def sink(kind, record):
        if record["name"] == "Bad":
            raise RuntimeError("duplicate registration_no")

    rows = [
        {"name": "Good", "email": "g@x.com", "registration_no": "R1"},
        {"name": "Bad", "email": "b@x.com", "registration_no": "R2"},
        {"name": "Also good", "email": "o@x.com", "registration_no": "R3"},
    ]
    report = run_import(rows, "students", sink=sink)

    assert report.success_count == 2
    assert report.errors == ("Row 2: duplicate registration_no",)


def test_scores_need_identifier_and_numeric_score():
    rows = [
        {"registration_no": "R1", "score": 88},
        {"student_id": 7, "score": "91.5", "subject": "Math"},
        {"score": 70},
        {"registration_no": "R2", "score": "abc"},
        {"registration_no": "R3"},
    ]
    seen = []
    report = run_import(rows, "scores", sink=lambda kind, rec: seen.append(rec))

    assert (report.total_rows, report.success_count, report.error_count) == (5, 2, 3)
    assert report.errors[0] == "Row 3: Missing required fields (registration_no or student_id, score)"
    assert report.errors[1] == "Row 4: Invalid score value 'abc'"
    assert report.errors[2].startswith("Row 5: Missing required fields")
    assert seen[1] == {"student_id": 7, "subject": "Math", "term": None, "score": 91.5}


def test_attendance_needs_identifier_and_date():
    rows = [
        {"registration_no": "R1", "date": "2024-03-01", "status": "Absent"},
        {"registration_no": "R2", "date": "2024-03-01"},
        {"date": "2024-03-01"},
    ]
    seen = []
    report = run_import(rows, "attendance", sink=lambda kind, rec: seen.append(rec))

    assert (report.success_count, report.error_count) == (2, 1)
    assert seen[1]["status"] == "Present"


def test_counts_never_exceed_total():
    rows = [{"name": "A"}, {}, {"name": "B", "email": "b@x", "registration_no": "R"}]
    report = run_import(rows, "students")
    assert report.success_count + report.error_count <= report.total_rows


def test_empty_sheet():
    assert run_import([], "attendance") == ImportReport()
