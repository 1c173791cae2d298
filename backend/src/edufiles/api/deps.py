from fastapi import Request

from edufiles.pipelines.importing.service import ImportService
from edufiles.storage.blob_store import BlobStore
from edufiles.uploads.orchestrator import UploadOrchestrator

# Services live on app.state, created once in create_app()


def get_blob_store(request: Request) -> BlobStore:
    return request.app.state.blob_store


def get_orchestrator(request: Request) -> UploadOrchestrator:
    return request.app.state.orchestrator


def get_import_service(request: Request) -> ImportService:
    return request.app.state.import_service
