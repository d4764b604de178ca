from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger


class AirlineError(Exception):
    """Base class for booking failures surfaced to API clients"""

    def __init__(self, message: str, status_code: int = 400) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class NotFoundError(AirlineError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 404)


class ConflictError(AirlineError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 409)


class InvalidStateError(AirlineError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 400)


class RequestInvalidError(AirlineError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 400)


async def airline_error_handler(request: Request, exc: Exception) -> JSONResponse:
    del request
    error = exc if isinstance(exc, AirlineError) else AirlineError(str(exc))
    return JSONResponse(status_code=error.status_code, content={"detail": error.message})


async def validation_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    del request
    errors = exc.errors() if isinstance(exc, RequestValidationError) else []
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "Invalid request", "errors": jsonable_encoder(errors)},
    )


async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.opt(exception=exc).error(
        f"Unhandled error on {request.method} {request.url.path}"
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AirlineError, airline_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, internal_error_handler)
