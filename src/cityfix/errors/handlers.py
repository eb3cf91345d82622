"""FastAPI exception handlers producing the CityFix error envelope."""

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from cityfix.errors.exceptions import CityFixError, UnauthorizedError, ValidationError
from cityfix.models.common import ErrorDetail, ErrorResponse

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all custom exception handlers on the FastAPI app."""

    @app.exception_handler(CityFixError)
    async def cityfix_error_handler(request: Request, exc: CityFixError):
        trace_id = getattr(request.state, "trace_id", "unknown")
        if isinstance(exc, UnauthorizedError):
            user = getattr(request.state, "user", {}) or {}
            logger.warning(
                "report_access_denied",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                    "trace_id": trace_id,
                    "user_sub": user.get("sub", "anonymous"),
                },
            )
        error_response = ErrorResponse(
            message=exc.message,
            error=ErrorDetail(
                code=exc.code,
                message=exc.message,
                details=exc.details,
                trace_id=trace_id,
                timestamp=datetime.now(timezone.utc),
            ),
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response.model_dump(mode="json", exclude_none=True),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        field = ".".join(str(part) for part in first.get("loc", ())[1:]) or None
        message = f"Invalid {field}: {first.get('msg')}" if field else "Request validation failed"
        details = {
            "field": field,
            "errors": [{"loc": list(e["loc"]), "msg": e["msg"]} for e in errors],
        }
        return await cityfix_error_handler(request, ValidationError(message, details=details))

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Server error"},
        )
