"""
Error taxonomy for the upload / import service.

Every error carries the HTTP status it maps to and a user-facing message.
Validation errors are raised before anything is written to storage.
"""


class UploadServiceError(Exception):
    """Base class for errors surfaced to the client in the JSON envelope."""

    status_code = 500
    message = "Request failed"

    def __init__(self, message: str | None = None, detail: str | None = None):
        self.message = message or self.message
        self.detail = detail
        super().__init__(self.message if detail is None else f"{self.message}: {detail}")


# ======================================================
# 400 – validation
# ======================================================

class NoFileProvided(UploadServiceError):
    status_code = 400
    message = "No file uploaded"


class UnsupportedType(UploadServiceError):
    status_code = 400
    message = (
        "Invalid file type. Only PDF, Word, PowerPoint, Excel, text, "
        "and image files are allowed."
    )


class TooLarge(UploadServiceError):
    status_code = 400
    message = "File too large"


class TooManyFiles(UploadServiceError):
    status_code = 400
    message = "Too many files"


class NotASpreadsheet(UploadServiceError):
    status_code = 400
    message = "Invalid file type. Only Excel (.xls, .xlsx) or CSV files are allowed."


class MissingImportType(UploadServiceError):
    status_code = 400
    message = "Import type is required"


class UnsupportedImportType(UploadServiceError):
    status_code = 400
    message = "Invalid import type"


# ======================================================
# 404
# ======================================================

class NotFound(UploadServiceError):
    status_code = 404
    message = "File not found"


# ======================================================
# 500
# ======================================================

class WriteFailure(UploadServiceError):
    status_code = 500
    message = "Failed to store file"


class ServiceFailure(UploadServiceError):
    """Unexpected failure, wrapped with the failing operation's message."""

    status_code = 500


# ======================================================
# Per-row (never leaves the import pipeline)
# ======================================================

class RowValidationError(ValueError):
    """A single import row has a malformed value."""
