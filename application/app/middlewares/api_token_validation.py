from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
import httpx
from app.logging.utils import get_app_logger
from app.middlewares.request_context import request_context

# Settings
from app.config.settings import SFAConfigs
configs = SFAConfigs()

logger = get_app_logger(__name__)


def _unauthorized(message: str) -> JSONResponse:
    return JSONResponse(status_code=401, content={"success": False, "message": message})


def extract_user_id(data: dict):
    """The auth service answers either {user_id} or {user: {id}}."""
    user_id = data.get("user_id")
    if user_id is None:
        user_id = (data.get("user") or {}).get("id")
    return user_id


class APITokenValidationMiddleware(BaseHTTPMiddleware):

    include_path_start = "/api/v1"

    def __init__(self, app, enabled: bool | None = None):
        super().__init__(app)
        self.enabled = configs.TOKEN_VALIDATION_ENABLED if enabled is None else enabled
        self.auth_service_url = configs.AUTH_SERVICE_URL
        if not self.auth_service_url.endswith("/"):
            self.auth_service_url += "/"
        self.validation_url = f"{self.auth_service_url}api/check-token/"
        self.timeout = configs.AUTH_SERVICE_TIMEOUT

    async def dispatch(self, request: Request, call_next):
        if not self.enabled or request.method == "OPTIONS":
            return await call_next(request)

        if not request.url.path.startswith(self.include_path_start):
            return await call_next(request)

        auth_header = request.headers.get("authorization")
        if not auth_header:
            logger.warning("token_missing_authorization_header")
            return _unauthorized("Token is required")

        if auth_header.startswith("Bearer "):
            token = auth_header.split(" ", 1)[1].strip()
        else:
            token = auth_header.strip()

        if not token:
            logger.warning("token_missing_bearer_value")
            return _unauthorized("Token is required")

        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(
                    self.validation_url,
                    params={"token": token},
                    timeout=self.timeout
                )

            logger.info(f"token_validation_status | status={response.status_code} url={self.validation_url}")

            if response.status_code != 200:
                logger.warning(f"token_validation_failed | status={response.status_code} response={response.text}")
                return _unauthorized("Token validation failed")

            data = response.json()
            if not data.get("valid", False):
                logger.warning(f"token_invalid | url={self.validation_url}")
                return _unauthorized("Invalid token")

        except httpx.RequestError as e:
            logger.warning(f"token_validation_request_error | url={self.validation_url} error={e}")
            return _unauthorized("Token validation failed")
        except ValueError as e:
            logger.error(f"token_validation_bad_response | error={e}")
            return _unauthorized("Token validation failed")

        user_id = extract_user_id(data)
        request.state.user_id = user_id
        request_context.user_id = user_id
        return await call_next(request)
