from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from edufiles.uploads.orchestrator import utc_timestamp


def _dump(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(by_alias=True)
    if isinstance(data, list):
        return [_dump(item) for item in data]
    return data


def envelope(
    message: str,
    data: Any = None,
    *,
    success: bool = True,
    error: str | None = None,
    status_code: int = 200,
    headers: dict | None = None,
) -> JSONResponse:
    """
    {success, message, data?, error?, timestamp} – shared by every JSON response
    """
    body: dict[str, Any] = {"success": success, "message": message}
    if data is not None:
        body["data"] = _dump(data)
    if error is not None:
        body["error"] = error
    body["timestamp"] = utc_timestamp()

    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body),
        headers=headers,
    )
