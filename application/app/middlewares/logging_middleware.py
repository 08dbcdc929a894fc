"""
Audit and Request Logging Middleware for FastAPI (SFA promotions)
One audit line per request, shipped through the audit logger for its HTTP method.
"""
import json
import socket
import time
from datetime import datetime

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from app.logging.utils import get_app_logger, init_audit_logger
from app.logging.config import LoggingConfig
from app.middlewares.request_context import create_request_id, request_context, clear_request_context

# settings
from app.config.settings import SFAConfigs
configs = SFAConfigs()

APP_NAME = configs.APP_NAME
APP_VERSION = configs.APP_VERSION


class AuditMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, exclude_paths: list[str] | None = None):
        super().__init__(app)
        self.logger = get_app_logger('app.logging')
        self.exclude_audit_paths = exclude_paths or ['/health', '/docs', '/redoc']
        self.hostname = socket.gethostname()
        self.app_name = APP_NAME
        self.version = APP_VERSION

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = create_request_id()
        start_time = time.time()
        timestamp = datetime.now().isoformat()

        # read body once; Starlette caches it for the endpoint
        body_bytes = await request.body()

        request_context.module_name = None
        request_context.request_method = request.method
        request_context.request_path = request.url.path

        should_audit = LoggingConfig.AUDIT_LOGGING_ENABLED and not any(
            request.url.path.startswith(p) for p in self.exclude_audit_paths
        )

        try:
            response = await call_next(request)
            duration = (time.time() - start_time) * 1000
            response.headers["X-Request-ID"] = request_id

            if should_audit:
                audit_data = self._build_audit_data(request, response, body_bytes, duration, request_id, timestamp)
                self._get_audit_logger_for_method(request.method).info("Audit log", extra=audit_data)
            return response
        except Exception as exc:
            duration = (time.time() - start_time) * 1000
            self.logger.error(
                f"Exception: {request.method} {request.url.path} - {exc.__class__.__name__} ({duration:.0f}ms)",
                exc_info=True,
            )
            if should_audit:
                audit_data = self._build_audit_data(request, Response(status_code=500), body_bytes, duration, request_id, timestamp)
                audit_data['exception'] = exc.__class__.__name__
                self._get_audit_logger_for_method(request.method).info("Audit log (exception)", extra=audit_data)
            raise
        finally:
            clear_request_context()

    def _get_audit_logger_for_method(self, method: str):
        return init_audit_logger(method)

    def _mask_headers(self, headers) -> dict:
        """Always replaces any Authorization header value with '****'."""
        return {
            k: ('****' if k.lower() == 'authorization' else v)
            for k, v in headers.items()
        }

    def _parse_body(self, request: Request, body_bytes: bytes):
        if not body_bytes:
            return {}
        text = body_bytes.decode('utf-8', errors='replace')
        if 'application/json' in request.headers.get('content-type', ''):
            try:
                return json.loads(text)
            except ValueError:
                return text[:1000]
        return text[:1000]

    def _response_data(self, response: Response):
        # capture only for non-2xx and when flag is enabled
        status = getattr(response, 'status_code', 0)
        if not LoggingConfig.CAPTURE_RESPONSE_BODY or 200 <= status < 300:
            return ''
        # streamed responses cannot be consumed here
        body = getattr(response, 'body', None)
        if body is None or hasattr(response, 'body_iterator'):
            return ''
        text = body.decode('utf-8', errors='replace')
        if 'application/json' in response.headers.get('content-type', ''):
            try:
                return json.loads(text)
            except ValueError:
                return text[:1000]
        return text[:1000]

    def _build_audit_data(
        self,
        request: Request,
        response: Response,
        body_bytes: bytes,
        duration: float,
        request_id: str,
        timestamp: str,
    ) -> dict:
        body = getattr(response, 'body', None)
        request_json = {
            "GET": dict(request.query_params),
            "BODY": self._parse_body(request, body_bytes),
            "HEADERS": self._mask_headers(dict(request.headers)),
        }

        return {
            'duration': round(duration, 2),
            'header_referer': request.headers.get('referer', ''),
            'hostname': self.hostname,
            'app_name': self.app_name,
            'module_name': request_context.module_name,
            'request': request_json,
            'request_id': request_id,
            'request_method': request.method,
            'request_path': request.url.path,
            'response': self._response_data(response),
            'size_in_bytes': len(body) if body is not None and not hasattr(response, 'body_iterator') else 0,
            'status_code': getattr(response, 'status_code', 0),
            'timestamp': timestamp,
            'version': self.version,
        }
