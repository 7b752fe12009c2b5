import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from signup.core.errors import (
    ConflictError,
    NotFoundError,
    PreconditionError,
    RegistrationError,
    StorageError,
)

logger = structlog.get_logger(__name__)

STATUS_CODES = {
    NotFoundError: 404,
    PreconditionError: 409,
    ConflictError: 409,
    StorageError: 503,
}


async def handle_registration_error(request: Request, exc: RegistrationError) -> JSONResponse:
    status_code = STATUS_CODES.get(type(exc), 400)
    logger.debug("registration_error_response", path=request.url.path, status_code=status_code, error=exc.code)
    return JSONResponse(status_code=status_code, content={"detail": exc.message, "error": exc.code})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RegistrationError, handle_registration_error)  # type: ignore[arg-type]
