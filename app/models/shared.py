from typing import Any
from pydantic import BaseModel
from datetime import datetime


class TimestampMixin(BaseModel):
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ApiResponse(BaseModel):
    """Envelope shared by every endpoint: {success, data?, error?, message?}."""

    success: bool
    data: Any = None
    error: str | None = None
    message: str | None = None


def ok(data: Any = None, message: str | None = None) -> dict:
    body: dict = {"success": True}
    if data is not None:
        body["data"] = data
    if message is not None:
        body["message"] = message
    return body


def fail(error: str) -> dict:
    return {"success": False, "error": error}
