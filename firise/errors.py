"""
errors.py — How failures reach the caller
400 carries every failing field, 404 a short detail, and 500 nothing but a
generic message (the traceback goes to the log, never the response).
"""

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

INTERNAL_ERROR = "Internal server error"

_SOURCES = ("body", "query", "path", "header", "cookie")


class ValidationFailed(HTTPException):
    """A request that parsed but breaks a rule storage can't express (e.g. unknown category)."""

    def __init__(self, errors: list[dict]):
        super().__init__(status_code=400, detail=errors)
        self.errors = errors

    @classmethod
    def field(cls, field: str, message: str) -> "ValidationFailed":
        return cls([{"field": field, "message": message}])


def internal_error(context: str) -> HTTPException:
    """Log the exception being handled and return the generic 500 to raise."""
    logger.exception("Unhandled error while %s", context)
    return HTTPException(status_code=500, detail=INTERNAL_ERROR)


def _field_name(loc) -> str:
    parts = [str(p) for p in loc]
    if parts and parts[0] in _SOURCES:
        parts = parts[1:]
    return ".".join(parts) or "body"


def validation_response(errors: list[dict]) -> JSONResponse:
    summary = "; ".join(f"{e['field']}: {e['message']}" for e in errors)
    return JSONResponse(
        status_code=400,
        content={"message": f"Validation failed: {summary}", "errors": errors},
    )


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [{"field": _field_name(e.get("loc", ())), "message": e.get("msg", "Invalid value")} for e in exc.errors()]
    return validation_response(errors)


async def validation_failed_handler(request: Request, exc: ValidationFailed):
    return validation_response(exc.errors)


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": INTERNAL_ERROR})


def register_error_handlers(app: FastAPI):
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(ValidationFailed, validation_failed_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
