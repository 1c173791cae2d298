import logging
import os
from dataclasses import dataclass
from pathlib import Path

from edufiles.config.env import get_int, get_path
from edufiles.config.paths import catalog_db_path, uploads_path

log = logging.getLogger(__name__)

# =====================================================
# ENVIRONMENT
# =====================================================

ENV = os.getenv("ENV", "development")
DEBUG = ENV == "development"

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO").upper()

# =====================================================
# BASE PATH
# =====================================================

BASE_DIR = Path(__file__).resolve().parents[3]

DATA_BASE_PATH = os.getenv(
    "EDUFILES_DATA_BASE_PATH",
    str(BASE_DIR / "data"),
)

# =====================================================
# UPLOAD LIMITS
# =====================================================

MAX_UPLOAD_MB = get_int("MAX_UPLOAD_MB", 10)

MAX_FILES_PER_REQUEST = get_int("MAX_FILES_PER_REQUEST", 5)

PUBLIC_FILES_URL = os.getenv(
    "PUBLIC_FILES_URL",
    "/api/v1/uploads/files",
)

ALLOWED_MIME_TYPES = frozenset({
    # documents
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-powerpoint",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "text/plain",
    # images
    "image/jpeg",
    "image/png",
    "image/gif",
})

SPREADSHEET_MIME_TYPES = frozenset({
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "text/csv",
})

# =====================================================
# JWT / AUTH
# =====================================================

JWT_SECRET_KEY = os.getenv(
    "JWT_SECRET_KEY",
    "DEV_ONLY_CHANGE_ME_IMMEDIATELY",
)

JWT_ALGORITHM = os.getenv(
    "JWT_ALGORITHM",
    "HS256",
)

JWT_EXPIRE_MINUTES = get_int("JWT_EXPIRE_MINUTES", 60)


# =====================================================
# UPLOAD SETTINGS (immutable, built once per app)
# =====================================================

@dataclass(frozen=True)
class UploadSettings:
    storage_root: Path
    catalog_path: Path
    allowed_mime_types: frozenset[str] = ALLOWED_MIME_TYPES
    spreadsheet_mime_types: frozenset[str] = SPREADSHEET_MIME_TYPES
    max_file_size: int = MAX_UPLOAD_MB * 1024 * 1024
    max_files: int = MAX_FILES_PER_REQUEST
    public_url_prefix: str = PUBLIC_FILES_URL

    @classmethod
    def for_base_path(cls, base: Path, **overrides) -> "UploadSettings":
        base = Path(base).expanduser().resolve()
        return cls(
            storage_root=uploads_path(base),
            catalog_path=catalog_db_path(base),
            **overrides,
        )


def load_upload_settings() -> UploadSettings:
    base = get_path("EDUFILES_DATA_BASE_PATH", DATA_BASE_PATH)
    settings = UploadSettings.for_base_path(base)

    log.info("[BOOT] ENV = %s", ENV)
    log.info("[BOOT] STORAGE_ROOT = %s", settings.storage_root)
    log.info("[BOOT] CATALOG = %s", settings.catalog_path)
    log.info(
        "[BOOT] MAX_FILE_SIZE = %s bytes, MAX_FILES = %s",
        settings.max_file_size,
        settings.max_files,
    )
    return settings
