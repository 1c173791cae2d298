"""
Upload APIs

- Single and batch upload (auth required)
- Serve / describe / delete stored files
- Spreadsheet import for students, scores, attendance
"""

import logging
from contextlib import contextmanager
from typing import List

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from edufiles.api.deps import get_blob_store, get_import_service, get_orchestrator
from edufiles.api.responses import envelope
from edufiles.api.schemas.uploads import (
    DeletedFileOut,
    ImportReportOut,
    UploadedFileOut,
)
from edufiles.core.auth import get_owner_id
from edufiles.errors import ServiceFailure, UploadServiceError
from edufiles.pipelines.importing.service import ImportService
from edufiles.storage.blob_store import BlobStore
from edufiles.storage.content_types import resolve_content_type
from edufiles.uploads.models import IncomingFile, UploadedFile
from edufiles.uploads.orchestrator import UploadOrchestrator

log = logging.getLogger(__name__)


# ======================================================
# Router
# ======================================================

router = APIRouter(
    prefix="/uploads",
    tags=["uploads"],
)


# ======================================================
# Internal helpers
# ======================================================

@contextmanager
def _failure(message: str):
    """Turn unexpected exceptions into a 500 carrying `message`."""
    try:
        yield
    except UploadServiceError:
        raise
    except Exception as exc:
        log.exception(message)
        raise ServiceFailure(message, detail=str(exc)) from exc


def _incoming(upload: UploadFile | None) -> IncomingFile | None:
    if upload is None or not upload.filename:
        return None
    return IncomingFile.from_stream(
        filename=upload.filename,
        content_type=upload.content_type,
        stream=upload.file,
        size=upload.size,
    )


def _out(record: UploadedFile) -> UploadedFileOut:
    return UploadedFileOut(**record.__dict__)


# ======================================================
# API
# ======================================================

@router.post("")
def upload_single_file(
    file: UploadFile | None = File(None),
    owner_id: str = Depends(get_owner_id),
    orchestrator: UploadOrchestrator = Depends(get_orchestrator),
):
    with _failure("Failed to upload file"):
        record = orchestrator.upload_one(_incoming(file), owner_id)

    return envelope("File uploaded successfully", _out(record))


@router.post("/batch")
def upload_multiple_files(
    files: List[UploadFile] | None = File(None),
    owner_id: str = Depends(get_owner_id),
    orchestrator: UploadOrchestrator = Depends(get_orchestrator),
):
    with _failure("Failed to upload files"):
        incoming = [f for f in map(_incoming, files or []) if f is not None]
        records = orchestrator.upload_many(incoming, owner_id)

    return envelope(
        f"{len(records)} files uploaded successfully",
        [_out(r) for r in records],
    )


@router.get("/files/{storage_id}")
def serve_file(
    storage_id: str,
    store: BlobStore = Depends(get_blob_store),
):
    """
    Stream the blob back. Content is piped chunk by chunk, never buffered whole.
    The file handle is closed once the response ends, sent in full or not.
    """
    with _failure("Failed to serve file"):
        size = store.size(storage_id)
        chunks = store.iter_chunks(storage_id)

    return StreamingResponse(
        chunks,
        media_type=resolve_content_type(storage_id),
        headers={
            "Content-Length": str(size),
            "Content-Disposition": f'inline; filename="{storage_id}"',
        },
        background=BackgroundTask(chunks.close),
    )


@router.get("/files/{storage_id}/info")
def describe_file(
    storage_id: str,
    orchestrator: UploadOrchestrator = Depends(get_orchestrator),
):
    with _failure("Failed to read file metadata"):
        record = orchestrator.describe(storage_id)

    return envelope("File found", _out(record))


@router.delete("/files/{storage_id}")
def delete_file(
    storage_id: str,
    owner_id: str = Depends(get_owner_id),
    orchestrator: UploadOrchestrator = Depends(get_orchestrator),
):
    with _failure("Failed to delete file"):
        orchestrator.delete(storage_id)
    log.info("File %s deleted by owner=%s", storage_id, owner_id)

    return envelope("File deleted successfully", DeletedFileOut(filename=storage_id))


@router.post("/import")
def import_excel_data(
    file: UploadFile | None = File(None),
    import_type: str | None = Form(None, alias="importType"),
    owner_id: str = Depends(get_owner_id),
    importer: ImportService = Depends(get_import_service),
):
    with _failure("Failed to import Excel data"):
        report = importer.import_file(_incoming(file), import_type)
    log.info("Import %s by owner=%s done", import_type, owner_id)

    return envelope(
        f"Excel import completed. {report.success_count} records imported successfully.",
        ImportReportOut(
            total_rows=report.total_rows,
            success_count=report.success_count,
            error_count=report.error_count,
            errors=list(report.errors),
        ),
    )
