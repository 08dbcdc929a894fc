from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from typing import Any
from app.config.sentry import capture_exception, add_breadcrumb
from app.logging.utils import get_app_logger
from app.middlewares.request_context import request_context

# Settings
from app.config.settings import SFAConfigs
configs = SFAConfigs()

logger = get_app_logger(__name__)

# Debug mode detection (DEBUG=false means production)
DEBUG = configs.DEBUG


def _error_payload(message: Any) -> dict:
    return {"success": False, "message": message}


async def _validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies and query strings are client errors: answer 400."""
    request_context.module_name = 'middleware_handlers'
    logger.warning(f"validation_error | method={request.method} url={str(request.url)} errors={exc.errors()}")

    add_breadcrumb(
        message=f"Validation error on {request.method} {request.url}",
        category="validation",
        level="warning",
        data={"errors": str(exc.errors())}
    )

    if not DEBUG:
        # Generic message in production (DEBUG=false)
        payload = _error_payload("Invalid request data")
    else:
        # Format errors in single readable line: "field_path: error_message"
        error_messages = []
        for err in exc.errors():
            field_path = " -> ".join(str(loc) for loc in err.get("loc", []))
            error_msg = err.get("msg", "Invalid input")
            error_messages.append(f"{field_path}: {error_msg}")

        if len(error_messages) == 1:
            payload = _error_payload(error_messages[0])
        else:
            payload = {**_error_payload("Validation errors"), "errors": error_messages}

    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=payload)


async def _general_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions with production-safe messages."""
    request_context.module_name = 'middleware_handlers'
    logger.error(
        f"unhandled_exception | method={request.method} url={str(request.url)} exception_type={type(exc).__name__} exception_message={str(exc)}",
        exc_info=True,
    )

    add_breadcrumb(
        message=f"Unhandled exception on {request.method} {request.url}",
        category="exception",
        level="error",
        data={"exception_type": type(exc).__name__, "exception_message": str(exc)}
    )
    capture_exception(exc)

    if not DEBUG:
        payload = _error_payload("Something went wrong")
    else:
        payload = _error_payload(str(exc))

    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=payload)


async def _http_exception_handler(request: Request, exc: Any):
    """Render HTTPException as {success: false, message}."""
    request_context.module_name = 'middleware_handlers'
    status_code = getattr(exc, 'status_code', status.HTTP_500_INTERNAL_SERVER_ERROR)
    detail = getattr(exc, 'detail', str(exc))
    # Log 5xx as errors and 4xx as warnings
    if status_code >= 500:
        logger.error(f"http_exception | method={request.method} url={str(request.url)} status_code={status_code} detail={detail}")
    else:
        logger.warning(f"http_exception | method={request.method} url={str(request.url)} status_code={status_code} detail={detail}")

    # Sentry only sees server errors
    if status_code >= 500:
        add_breadcrumb(
            message=f"HTTP {status_code} error on {request.method} {request.url}",
            category="http",
            level="error",
            data={"status_code": status_code, "detail": detail}
        )
        capture_exception(exc)

    if DEBUG or status_code < 500:
        # Client errors carry the service's own message
        message = detail
    else:
        message = "Something went wrong"

    return JSONResponse(status_code=status_code, content=_error_payload(message), headers=getattr(exc, 'headers', None))


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all custom exception handlers to the given FastAPI instance."""
    from starlette.exceptions import HTTPException

    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(HTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _general_exception_handler)
