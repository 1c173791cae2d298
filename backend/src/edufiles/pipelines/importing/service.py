"""
Import Service

- Gates the upload (spreadsheet type + size)
- Stages it in the blob store under a generated name
- Parses the first sheet and runs the row pipeline
- Always deletes the staged file, whatever happened
"""

import logging

from edufiles.errors import NoFileProvided
from edufiles.pipelines.importing.models import ImportReport, ImportType
from edufiles.pipelines.importing.pipeline import RecordSink, run_import
from edufiles.pipelines.importing.reader import read_rows
from edufiles.storage.blob_store import BlobStore
from edufiles.storage.namer import generate_storage_id
from edufiles.uploads.models import IncomingFile
from edufiles.uploads.policy import AcceptancePolicy, Rejected

log = logging.getLogger(__name__)


class ImportService:

    def __init__(
        self,
        policy: AcceptancePolicy,
        store: BlobStore,
        sink: RecordSink | None = None,
    ):
        self.policy = policy
        self.store = store
        self.sink = sink

    def import_file(self, file: IncomingFile | None, import_type: str | None) -> ImportReport:
        if file is None:
            raise NoFileProvided()

        # Unknown / missing type fails before anything is staged
        kind = ImportType.parse(import_type)

        decision = self.policy.accept_spreadsheet(file.candidate)
        if isinstance(decision, Rejected):
            log.info(
                "Import rejected name=%s type=%s: %s",
                file.filename,
                file.content_type,
                decision.error,
            )
            raise decision.error

        storage_id = generate_storage_id(file.filename)
        try:
            self.store.put(storage_id, file.stream)

            # ---------- PARSE ----------
            with self.store.open_read(storage_id) as fh:
                rows = read_rows(fh)
            log.info("Parsed %s row(s) from %s", len(rows), file.filename)

            # ---------- VALIDATE ----------
            return run_import(rows, kind, sink=self.sink)
        finally:
            self._cleanup(storage_id)

    def _cleanup(self, storage_id: str) -> None:
        # Cleanup errors are logged, the import outcome is kept
        try:
            if self.store.exists(storage_id):
                self.store.delete(storage_id)
        except Exception:
            log.exception("Could not remove staged import file id=%s", storage_id)
