import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from edufiles.api.responses import envelope
from edufiles.api.uploads import router as uploads_router
from edufiles.catalog.db import FileCatalog
from edufiles.core.config import LOG_LEVEL, UploadSettings, load_upload_settings
from edufiles.errors import UploadServiceError
from edufiles.pipelines.importing.pipeline import RecordSink
from edufiles.pipelines.importing.service import ImportService
from edufiles.storage.blob_store import BlobStore
from edufiles.uploads.orchestrator import UploadOrchestrator
from edufiles.uploads.policy import AcceptancePolicy

log = logging.getLogger(__name__)


def _register_error_handlers(app: FastAPI) -> None:

    @app.exception_handler(UploadServiceError)
    async def upload_error_handler(request: Request, exc: UploadServiceError):
        return envelope(
            exc.message,
            success=False,
            error=exc.detail,
            status_code=exc.status_code,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return envelope(
            str(exc.detail),
            success=False,
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return envelope(
            "Invalid request",
            success=False,
            error=str(exc.errors()),
            status_code=400,
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        log.exception("Unhandled error on %s %s", request.method, request.url.path)
        return envelope(
            "Internal server error",
            success=False,
            error=str(exc),
            status_code=500,
        )


def create_app(
    settings: UploadSettings | None = None,
    sink: RecordSink | None = None,
) -> FastAPI:
    """
    Build the EDU Files backend.

    settings defaults to the environment (see core.config); sink receives
    every accepted import record and defaults to logging it.
    """
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(
        title="EDU Files API",
        version="0.1.0",
        description="File uploads and spreadsheet imports for EDU services",
    )

    # -------------------------
    # Middleware
    # -------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ==================================================
    # SERVICES (built once, shared by all requests)
    # ==================================================
    settings = settings or load_upload_settings()
    policy = AcceptancePolicy(settings)
    store = BlobStore(settings.storage_root)
    catalog = FileCatalog(settings.catalog_path)

    app.state.settings = settings
    app.state.policy = policy
    app.state.blob_store = store
    app.state.catalog = catalog
    app.state.orchestrator = UploadOrchestrator(settings, policy, store, catalog)
    app.state.import_service = ImportService(policy, store, sink=sink)

    _register_error_handlers(app)

    # -------------------------
    # Routers
    # -------------------------
    app.include_router(
        uploads_router,
        prefix="/api/v1",
    )

    # -------------------------
    # Health check
    # -------------------------
    @app.get("/health", tags=["system"])
    def health_check():
        return {"status": "ok"}

    return app


# App instance for Uvicorn
app = create_app()
