"""
Translate application errors into JSON responses.
"""
import logging
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from app.core.exceptions import AppError, DependencyError, StoreError

logger = logging.getLogger(__name__)


def _error_body(exc: AppError) -> dict:
    body = {"success": False, "message": exc.message}
    if isinstance(exc, DependencyError) and exc.cause is not None:
        body["error"] = str(exc.cause)
    return body


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            f"{request.method} {request.url.path} failed: {exc.message}",
            exc_info=getattr(exc, "cause", None) or exc,
        )
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    logger.warning(f"{request.method} {request.url.path} validation error: {errors}")
    fields = sorted({str(err["loc"][-1]) for err in errors if err.get("loc")})
    message = "Invalid or missing fields: " + ", ".join(fields) if fields else "Invalid request."
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "message": message},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"{request.method} {request.url.path} failed: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": AppError.default_message, "error": str(exc)},
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    return await app_error_handler(request, StoreError(cause=exc))


EXCEPTION_HANDLERS = {
    AppError: app_error_handler,
    RequestValidationError: validation_error_handler,
    SQLAlchemyError: database_error_handler,
    Exception: unhandled_error_handler,  # Catch-all for unhandled exceptions
}


def register_exception_handlers(app: FastAPI) -> None:
    for exception_class, handler in EXCEPTION_HANDLERS.items():
        app.add_exception_handler(exception_class, handler)
