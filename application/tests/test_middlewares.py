import httpx
import pytest
from fastapi import FastAPI, HTTPException, Request
from fastapi.testclient import TestClient

from app.middlewares import api_token_validation
from app.middlewares.api_token_validation import APITokenValidationMiddleware, extract_user_id
from app.middlewares.handlers import register_exception_handlers
from app.middlewares.logging_middleware import AuditMiddleware
from app.middlewares.request_context import request_context


def build_app():
    app = FastAPI()
    app.add_middleware(APITokenValidationMiddleware, enabled=True)
    register_exception_handlers(app)

    @app.get("/api/v1/whoami")
    async def whoami(request: Request):
        return {"user_id": getattr(request.state, "user_id", None)}

    @app.get("/api/v1/boom")
    async def boom():
        raise HTTPException(status_code=500, detail="store unavailable")

    @app.get("/open")
    async def open_route():
        return {"ok": True}

    return app


@pytest.fixture
def auth_service(monkeypatch):
    """Route the middleware's outgoing token check to an in-process handler."""
    answers = {}
    real_client = httpx.AsyncClient

    def handler(request: httpx.Request):
        token = request.url.params.get("token")
        status, payload = answers.get(token, (200, {"valid": False}))
        return httpx.Response(status, json=payload)

    monkeypatch.setattr(api_token_validation.httpx, "AsyncClient",
                        lambda: real_client(transport=httpx.MockTransport(handler)))
    return answers


def test_missing_token_is_rejected(auth_service):
    response = TestClient(build_app()).get("/api/v1/whoami")
    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "Token is required"}


def test_invalid_token_is_rejected(auth_service):
    response = TestClient(build_app()).get("/api/v1/whoami", headers={"Authorization": "Bearer nope"})
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid token"


def test_auth_service_error_is_rejected(auth_service):
    auth_service["broken"] = (503, {"detail": "down"})
    response = TestClient(build_app()).get("/api/v1/whoami", headers={"Authorization": "Bearer broken"})
    assert response.status_code == 401
    assert response.json()["message"] == "Token validation failed"


def test_valid_token_sets_caller_identity(auth_service):
    auth_service["good"] = (200, {"valid": True, "user": {"id": 17}})
    response = TestClient(build_app()).get("/api/v1/whoami", headers={"Authorization": "Bearer good"})
    assert response.status_code == 200
    assert response.json() == {"user_id": 17}


def test_paths_outside_api_are_not_checked(auth_service):
    assert TestClient(build_app()).get("/open").status_code == 200


def test_http_errors_render_success_false(auth_service):
    auth_service["good"] = (200, {"valid": True, "user_id": 3})
    response = TestClient(build_app()).get("/api/v1/boom", headers={"Authorization": "Bearer good"})
    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "store unavailable"}


def test_unknown_route_renders_success_false():
    response = TestClient(build_app()).get("/nowhere")
    assert response.status_code == 404
    assert response.json()["success"] is False


def test_extract_user_id_shapes():
    assert extract_user_id({"user_id": 5}) == 5
    assert extract_user_id({"user": {"id": 6}}) == 6
    assert extract_user_id({"valid": True}) is None


def test_audit_middleware_gives_each_request_its_own_context():
    app = FastAPI()
    app.add_middleware(AuditMiddleware)

    @app.get("/api/v1/context")
    async def context_route():
        return {"request_id": request_context.request_id, "path": request_context.request_path}

    client = TestClient(app)
    first = client.get("/api/v1/context")
    second = client.get("/api/v1/context")

    assert first.json() == {"request_id": first.headers["X-Request-ID"], "path": "/api/v1/context"}
    assert second.json()["request_id"] == second.headers["X-Request-ID"]
    assert first.headers["X-Request-ID"] != second.headers["X-Request-ID"]
