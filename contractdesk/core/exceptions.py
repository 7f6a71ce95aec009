"""Application-level exceptions and FastAPI exception handlers."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppException(Exception):
    """Base application exception.

    ``code`` is the error kind, ``stage`` names the pipeline step that failed
    (upstream errors only) and ``detail`` carries the raw upstream body.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        code: str = "INTERNAL_ERROR",
        *,
        stage: str | None = None,
        detail: str | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.code = code
        self.stage = stage
        self.detail = detail
        super().__init__(message)


class ValidationError(AppException):
    def __init__(self, message: str):
        super().__init__(message, status_code=400, code="VALIDATION_ERROR")


class AuthenticationError(AppException):
    """Bad login credentials. 400, not 401, so callers cannot tell which check failed."""

    def __init__(self, message: str = "Invalid name, date of birth or PIN."):
        super().__init__(message, status_code=400, code="AUTHENTICATION_ERROR")


class UnauthorizedError(AppException):
    def __init__(self, message: str = "Authorization Bearer token is required."):
        super().__init__(message, status_code=401, code="UNAUTHORIZED")


class AuthorizationError(AppException):
    def __init__(self, message: str = "Access denied"):
        super().__init__(message, status_code=403, code="FORBIDDEN")


class NotFoundError(AppException):
    def __init__(self, entity: str, entity_id: str | None = None):
        msg = f"{entity} not found" if not entity_id else f"{entity} '{entity_id}' not found"
        super().__init__(msg, status_code=404, code="NOT_FOUND")


class ConfigurationError(AppException):
    """Server configuration is missing or invalid; needs operator action."""

    def __init__(self, message: str):
        super().__init__(f"server config missing: {message}", status_code=500, code="CONFIGURATION_ERROR")


class UpstreamError(AppException):
    """An external API call failed at the named stage."""

    def __init__(self, stage: str, detail: str):
        super().__init__(
            f"{stage} failed: {detail}",
            status_code=500,
            code="UPSTREAM_ERROR",
            stage=stage,
            detail=detail,
        )


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def _error_body(code: str, message: str, stage: str | None = None) -> dict:
    body = {"error": message, "code": code}
    if stage:
        body["stage"] = stage
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all custom exception handlers to the FastAPI app."""

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s → %s: %s", request.method, request.url.path, exc.code, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.code, exc.message, exc.stage),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError,
    ) -> JSONResponse:
        first = exc.errors()[0] if exc.errors() else {}
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{field}: {first.get('msg', 'invalid value')}" if field else "Invalid request body."
        return JSONResponse(status_code=400, content=_error_body("VALIDATION_ERROR", message))

    @app.exception_handler(404)
    async def not_found_handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content=_error_body("NOT_FOUND", "Not Found"),
        )

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content=_error_body("INTERNAL_ERROR", "An unexpected error occurred"),
        )
