"""Centralized exception handlers for the FastAPI app.

Register with register_exception_handlers(app). Maps domain exceptions to
JSON responses. Cache store errors never reach here; CacheService absorbs them.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from lms_cache.core.config import get_settings
from lms_cache.domain.exceptions import LmsCacheException

logger = logging.getLogger(__name__)

# Map domain error_code to HTTP status when applicable
_ERROR_CODE_STATUS: dict[str, int] = {
    "VALIDATION_ERROR": 400,
    "CACHE_SERIALIZATION_ERROR": 500,
}


def _lms_cache_exception_handler(request: Request, exc: LmsCacheException) -> JSONResponse:
    """Return JSON from LmsCacheException.to_dict() with appropriate status code."""
    status = _ERROR_CODE_STATUS.get(exc.error_code, 400)
    return JSONResponse(status_code=status, content=exc.to_dict())


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500; include detail only when debug is True."""
    logger.exception("Unhandled exception: %s", exc)
    detail: Any = str(exc) if get_settings().debug else "Internal server error"
    return JSONResponse(
        status_code=500,
        content={"error": "INTERNAL_ERROR", "message": detail},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers: LmsCacheException (and subclasses), generic Exception."""
    app.add_exception_handler(LmsCacheException, _lms_cache_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
