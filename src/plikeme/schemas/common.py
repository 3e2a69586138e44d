"""Shared response envelope helpers."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Envelope returned for every failed request."""

    success: bool = Field(False, description="Always false for errors")
    error: str = Field(..., description="Localized error message")
    errors: list[Any] | None = Field(None, description="Every validation problem, when known")


def ok(data: Any = None, message: str | None = None, **extra: Any) -> dict[str, Any]:
    """Build a success envelope; extra keys (``total``, ``count``...) sit beside ``data``."""
    body: dict[str, Any] = {"success": True, "data": data}
    if message is not None:
        body["message"] = message
    body.update(extra)
    return body
