#!/usr/bin/env python3
"""
Error handlers for the web application.

Every error body has the shape {"success": false, "message": ...}; validation
failures add "errors": {field: [messages]}. Messages follow the request locale.
"""

import logging
from typing import Dict, List

from fastapi import Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from core.exam.exceptions import ExamProcessingError
from core.exam.messages import translate
from .dependencies import resolve_locale

logger = logging.getLogger(__name__)


def _error_body(message: str, errors: Dict[str, List[str]] = None) -> dict:
    body = {"success": False, "message": message}
    if errors is not None:
        body["errors"] = errors
    return body


def field_errors(exc: RequestValidationError) -> Dict[str, List[str]]:
    """Group pydantic errors by the last path element (body prefix dropped)."""
    errors: Dict[str, List[str]] = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        field = loc[-1] if loc else "body"
        errors.setdefault(field, []).append(error.get("msg", "Invalid value"))
    return errors


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """422 with per-field messages. Raised before any job is created."""
    errors = field_errors(exc)
    logger.info(f"Validation failed for {request.url.path}: {errors}")

    return JSONResponse(
        status_code=422,
        content=_error_body(translate("validation_error", resolve_locale(request)), errors)
    )


async def exam_processing_exception_handler(request: Request, exc: ExamProcessingError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"Exam processing error in {request.url.path}: {exc.message}", exc_info=True)

    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message))


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None)
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions.

    The traceback is logged; the client only gets a generic message.
    """
    logger.exception(f"Unexpected error in {request.url.path}")

    return JSONResponse(
        status_code=500,
        content=_error_body(translate("server_error", resolve_locale(request)))
    )
