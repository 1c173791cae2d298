# src/edufiles/pipelines/importing/pipeline.py
import logging
from functools import reduce
from typing import Callable, Sequence

from edufiles.pipelines.importing.models import (
    ImportReport,
    ImportType,
    Row,
    RowRejected,
)
from edufiles.pipelines.importing.validators import VALIDATORS

log = logging.getLogger(__name__)

# sink(import_type, record) – hands an accepted record to the data store
RecordSink = Callable[[ImportType, Row], None]


def log_sink(import_type: ImportType, record: Row) -> None:
    log.debug("Would import %s record: %s", import_type.value, record)


def run_import(
    rows: Sequence[Row],
    import_type: ImportType | str,
    sink: RecordSink | None = None,
) -> ImportReport:
    """
    Validate rows in order and tally the outcome.

    A row that fails, including one whose validator or sink raises, is
    recorded as "Row <n>: <reason>" (1-indexed) and the next row is tried.
    """
    import_type = ImportType.parse(import_type)
    validate = VALIDATORS[import_type]
    sink = sink or log_sink

    def step(report: ImportReport, numbered: tuple[int, Row]) -> ImportReport:
        index, row = numbered
        try:
            outcome = validate(row)
            if isinstance(outcome, RowRejected):
                return report.with_error(f"Row {index}: {outcome.reason}")
            sink(import_type, outcome.record)
        except Exception as exc:
            log.debug("Row %s failed: %s", index, exc)
            return report.with_error(f"Row {index}: {exc}")
        return report.with_success()

    report = reduce(step, enumerate(rows, start=1), ImportReport(total_rows=len(rows)))

    log.info(
        "Import %s finished: total=%s success=%s errors=%s",
        import_type.value,
        report.total_rows,
        report.success_count,
        report.error_count,
    )
    return report
