from typing import List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class UploadedFileOut(_CamelModel):
    """
    Metadata returned for one stored file
    """
    id: str
    storage_id: str = Field(..., description="Generated name the blob is stored under")
    original_name: str
    mime_type: str
    size_bytes: int
    owner_id: str
    uploaded_at: str
    access_url: str


class ImportReportOut(_CamelModel):
    total_rows: int
    success_count: int
    error_count: int
    errors: List[str]


class DeletedFileOut(BaseModel):
    filename: str
