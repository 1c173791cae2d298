# src/edufiles/uploads/orchestrator.py
import logging
import uuid
from datetime import datetime, timezone
from typing import Sequence

from edufiles.catalog.db import FileCatalog
from edufiles.core.config import UploadSettings
from edufiles.errors import NoFileProvided, NotFound
from edufiles.storage.blob_store import BlobStore
from edufiles.storage.namer import generate_storage_id
from edufiles.uploads.models import IncomingFile, UploadedFile
from edufiles.uploads.policy import AcceptancePolicy, Rejected

log = logging.getLogger(__name__)


def utc_timestamp() -> str:
    """ISO-8601, millisecond precision, Z suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class UploadOrchestrator:
    """
    Policy check, naming, blob write and catalog record for uploads.

    Multi-file uploads are all-or-nothing: every file is checked before the
    first byte is written, and a mid-batch write failure removes whatever
    the batch already stored.
    """

    def __init__(
        self,
        settings: UploadSettings,
        policy: AcceptancePolicy,
        store: BlobStore,
        catalog: FileCatalog,
    ):
        self.settings = settings
        self.policy = policy
        self.store = store
        self.catalog = catalog

    # -------------------------
    # Upload
    # -------------------------
    def upload_one(self, file: IncomingFile | None, owner_id: str) -> UploadedFile:
        if file is None:
            raise NoFileProvided()

        self._enforce(file, batch_size=1)
        return self._persist(file, owner_id)

    def upload_many(self, files: Sequence[IncomingFile] | None, owner_id: str) -> list[UploadedFile]:
        if not files:
            raise NoFileProvided("No files uploaded")

        batch = self.policy.check_batch(len(files))
        if isinstance(batch, Rejected):
            log.info("Batch rejected owner=%s: %s", owner_id, batch.error)
            raise batch.error

        for file in files:
            self._enforce(file, batch_size=len(files))

        stored: list[UploadedFile] = []
        try:
            for file in files:
                stored.append(self._persist(file, owner_id))
        except Exception:
            log.warning("Batch write failed, rolling back %s stored file(s)", len(stored))
            for record in stored:
                self._discard(record.storage_id)
            raise
        return stored

    # -------------------------
    # Delete
    # -------------------------
    def delete(self, storage_id: str) -> None:
        """
        Remove catalog row and blob together. If the blob cannot be
        unlinked the row deletion is rolled back.
        """
        if not self.store.exists(storage_id):
            # Row without blob: drop the dangling metadata, then 404
            self.catalog.remove(storage_id)
            raise NotFound(detail=storage_id)

        with self.catalog.transaction() as conn:
            self.catalog.remove(storage_id, conn)
            self.store.delete(storage_id)

    def describe(self, storage_id: str) -> UploadedFile:
        record = self.catalog.get(storage_id)
        if record is None or not self.store.exists(storage_id):
            raise NotFound(detail=storage_id)
        return record

    # -------------------------
    # Internal
    # -------------------------
    def _enforce(self, file: IncomingFile, batch_size: int) -> None:
        decision = self.policy.accept(file.candidate, batch_size=batch_size)
        if isinstance(decision, Rejected):
            log.info(
                "Upload rejected name=%s type=%s size=%s: %s",
                file.filename,
                file.content_type,
                file.size,
                decision.error,
            )
            raise decision.error

    def _persist(self, file: IncomingFile, owner_id: str) -> UploadedFile:
        storage_id = generate_storage_id(file.filename)
        self.store.put(storage_id, file.stream)

        record = UploadedFile(
            id=str(uuid.uuid4()),
            storage_id=storage_id,
            original_name=file.filename,
            mime_type=file.content_type,
            size_bytes=file.size,
            owner_id=str(owner_id),
            uploaded_at=utc_timestamp(),
            access_url=f"{self.settings.public_url_prefix.rstrip('/')}/{storage_id}",
        )
        try:
            self.catalog.add(record)
        except Exception:
            log.exception("Catalog insert failed, removing blob id=%s", storage_id)
            self.store.delete(storage_id)
            raise
        return record

    def _discard(self, storage_id: str) -> None:
        try:
            with self.catalog.transaction() as conn:
                self.catalog.remove(storage_id, conn)
                if self.store.exists(storage_id):
                    self.store.delete(storage_id)
        except Exception:
            log.exception("Rollback failed for id=%s", storage_id)
