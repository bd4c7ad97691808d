from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class AppError(Exception):
    """Base for errors surfaced to the caller with a stable kind."""

    kind = "app_error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"success": False, "kind": self.kind, "message": self.message}


class ValidationError(AppError):
    kind = "validation_error"
    status_code = 400


class PermissionDeniedError(AppError):
    kind = "permission_denied"
    status_code = 403


class NotFoundError(AppError):
    kind = "not_found"
    status_code = 404


class ConflictError(AppError):
    kind = "conflict"
    status_code = 409


class ExternalServiceError(AppError):
    """A collaborator (processor, push gateway) failed or timed out. Retryable."""

    kind = "external_service_error"
    status_code = 502


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
