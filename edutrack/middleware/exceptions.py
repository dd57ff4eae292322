from fastapi import Request
from starlette.exceptions import HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from edutrack.schemas.response import ErrorResponse, ErrorDetail
from datetime import datetime, timezone
import logging
import uuid

logger = logging.getLogger(__name__)

def _get_error_code(status_code: int) -> str:
    code_map = {
        400: "BAD_REQUEST",
        401: "UNAUTHORIZED",
        403: "FORBIDDEN",
        404: "NOT_FOUND",
        409: "CONFLICT",
        422: "VALIDATION_ERROR",
        500: "INTERNAL_SERVER_ERROR",
        501: "NOT_IMPLEMENTED",
    }
    return code_map.get(status_code, f"HTTP_{status_code}")

def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or str(uuid.uuid4())

def _issues(exc: RequestValidationError) -> list:
    issues = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        issues.append({"field": ".".join(loc), "message": error.get("msg"), "type": error.get("type")})
    return issues

async def validation_exception_handler(request: Request, exc: RequestValidationError):
    request_id = _request_id(request)
    issues = _issues(exc)
    error_response = ErrorResponse(
        error=ErrorDetail(
            code="VALIDATION_ERROR",
            message="Validation error",
            details={"issues": issues}
        ),
        timestamp=datetime.now(timezone.utc).isoformat(),
        path=request.url.path,
        request_id=request_id
    )
    logger.warning(f"[{request_id}] Validation error: {issues}", extra={"request_id": request_id})
    return JSONResponse(status_code=400, content=error_response.model_dump())

async def global_exception_handler(request: Request, exc: Exception):
    request_id = _request_id(request)

    if isinstance(exc, HTTPException):
        error_code = getattr(exc, "error_code", None) or _get_error_code(exc.status_code)
        error_response = ErrorResponse(
            error=ErrorDetail(
                code=error_code,
                message=exc.detail if isinstance(exc.detail, str) else str(exc.detail)
            ),
            timestamp=datetime.now(timezone.utc).isoformat(),
            path=request.url.path,
            request_id=request_id
        )
        logger.warning(f"[{request_id}] HTTP {exc.status_code}: {exc.detail}", extra={"request_id": request_id})
        return JSONResponse(status_code=exc.status_code, content=error_response.model_dump(), headers=exc.headers)

    error_response = ErrorResponse(
        error=ErrorDetail(
            code="INTERNAL_SERVER_ERROR",
            message="An unexpected error occurred",
        ),
        timestamp=datetime.now(timezone.utc).isoformat(),
        path=request.url.path,
        request_id=request_id
    )
    logger.error(f"[{request_id}] Unhandled exception: {exc}", exc_info=True, extra={"request_id": request_id})
    return JSONResponse(status_code=500, content=error_response.model_dump())
