import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = structlog.get_logger()


class AppError(Exception):
    def __init__(self, status_code: int, detail: str) -> None:
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail


class TransformError(Exception):
    """Base for everything the studio pipeline can raise.

    Only the terminal errors and the input errors ever reach the HTTP layer;
    per-endpoint errors are absorbed by the fallback chain.
    """

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(TransformError):
    pass


class InvalidImageError(TransformError):
    status_code = 400


class TransportError(TransformError):
    def __init__(self, message: str, endpoint: str) -> None:
        super().__init__(message)
        self.endpoint = endpoint


class UnrecognizedResponseError(TransformError):
    def __init__(self, endpoint: str) -> None:
        super().__init__(f"Endpoint {endpoint} returned an unrecognized response")
        self.endpoint = endpoint


class AllEndpointsFailedError(TransformError):
    pass


class NoUsableResponseError(TransformError):
    def __init__(self, message: str = "All Fal.ai endpoints failed") -> None:
        super().__init__(message)


async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


async def _transform_error_handler(request: Request, exc: TransformError) -> JSONResponse:
    log = logger.warning if exc.status_code < 500 else logger.error
    log("process_image_failed", path=request.url.path, error=exc.message, kind=type(exc).__name__)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unhandled_error", path=request.url.path, error=str(exc), exc_info=exc)
    return JSONResponse(status_code=500, content={"error": str(exc) or "Internal server error"})


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [{key: value for key, value in error.items() if key in ("loc", "msg", "type")} for error in exc.errors()]
    return JSONResponse(status_code=422, content={"detail": errors})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, _app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(TransformError, _transform_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unhandled_error_handler)
