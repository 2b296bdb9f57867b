"""Typed errors raised by the core and their structured API rendering."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.responses import JSONResponse


def build_error_payload(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    payload = {"error": {"code": code, "message": message}}
    if details is not None:
        payload["error"]["details"] = details
    return payload


class TodoError(Exception):
    """Base class for every failure the core reports to its caller."""

    status_code = 500
    code = "internal_error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    @property
    def payload(self) -> Dict[str, Any]:
        return build_error_payload(self.code, self.message, self.details)


class NotFoundError(TodoError):
    """Target is absent or not owned by the acting user."""

    status_code = 404
    code = "not_found"


class InvalidIndexError(TodoError):
    """Requested position lies outside the sibling scope."""

    status_code = 400
    code = "invalid_index"


class StoreFailureError(TodoError):
    """The store could not apply the operation; nothing was committed."""

    status_code = 500
    code = "store_failure"


class IdAllocationError(StoreFailureError):
    """No free identifier was found within the attempt limit."""

    code = "id_allocation_failed"


async def todo_error_handler(_: Request, exc: TodoError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.payload)
