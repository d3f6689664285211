"""Unified error handling — ServiceError → JSON."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from protodiff.services import NotFoundError, ServiceError

_STATUS_MAP: dict[type[ServiceError], int] = {
    NotFoundError: 404,
}


async def _service_error_handler(_request: Request, exc: ServiceError) -> JSONResponse:
    status = 500
    for cls in type(exc).__mro__:
        if cls in _STATUS_MAP:
            status = _STATUS_MAP[cls]
            break
    return JSONResponse(status_code=status, content={"detail": str(exc)})


def register_error_handlers(app: FastAPI) -> None:
    """Register exception handlers on the app."""
    app.add_exception_handler(ServiceError, _service_error_handler)  # type: ignore[arg-type]
