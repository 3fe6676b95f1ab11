"""애플리케이션 진입점 최소 동작 테스트."""

from __future__ import annotations

import importlib

from fastapi.testclient import TestClient

from app.core.config import get_settings


def _set_required_env(monkeypatch, **overrides: str) -> None:
    monkeypatch.setenv("JWT_ACCESS_SECRET", "test-secret")
    monkeypatch.setenv("JWT_ACCESS_EXPIRY_MINUTES", "30")
    monkeypatch.setenv("SERVICE_SECRET", "test-service-secret")
    monkeypatch.setenv("DOCS_MODE", "disabled")
    monkeypatch.setenv("DATABASE_URL", "sqlite:///:memory:")
    for key, value in overrides.items():
        monkeypatch.setenv(key, value)
    get_settings.cache_clear()


def _load_main_module():
    import app.main as main_module

    return importlib.reload(main_module)


def test_health_check_endpoint(monkeypatch) -> None:
    _set_required_env(monkeypatch)
    main_module = _load_main_module()

    client = TestClient(main_module.app)
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_unknown_route_uses_error_body(monkeypatch) -> None:
    _set_required_env(monkeypatch)
    main_module = _load_main_module()

    client = TestClient(main_module.app)
    response = client.get("/nowhere")

    assert response.status_code == 404
    assert response.json()["error"] == "NOT_FOUND"


def test_docs_disabled_by_default(monkeypatch) -> None:
    _set_required_env(monkeypatch)
    main_module = _load_main_module()

    client = TestClient(main_module.app)

    assert client.get("/docs").status_code == 404
    assert client.get("/redoc").status_code == 404
    assert client.get("/openapi.json").status_code == 404


def test_docs_secret_mode_requires_service_secret(monkeypatch) -> None:
    _set_required_env(monkeypatch, DOCS_MODE="secret")
    main_module = _load_main_module()

    client = TestClient(main_module.app)

    unauthorized = client.get("/docs")
    assert unauthorized.status_code == 401
    assert unauthorized.json()["error"] == "UNAUTHORIZED"

    authorized = client.get("/docs", headers={"x-service-secret": "test-service-secret"})
    assert authorized.status_code == 200


def test_public_docs_list_trip_routes(monkeypatch) -> None:
    _set_required_env(monkeypatch, DOCS_MODE="public")
    main_module = _load_main_module()

    paths = main_module.app.openapi()["paths"]

    assert {"/trips", "/trips/{trip_id}", "/trips/{trip_id}/days", "/trips/{trip_id}/destinations"} <= set(paths)
    assert "/api/auth/me" in paths


def test_security_headers_are_attached(monkeypatch) -> None:
    _set_required_env(monkeypatch)
    main_module = _load_main_module()

    client = TestClient(main_module.app)
    response = client.get("/health")

    assert response.headers["x-content-type-options"] == "nosniff"
    assert response.headers["x-frame-options"] == "DENY"
    assert response.headers["referrer-policy"] == "no-referrer"
    assert response.headers["permissions-policy"] == "geolocation=(), microphone=(), camera=()"


def test_cors_allowlist_from_env(monkeypatch) -> None:
    _set_required_env(
        monkeypatch,
        CORS_ALLOW_ORIGINS="https://example.com",
        CORS_ALLOW_METHODS="GET,POST,OPTIONS",
        CORS_ALLOW_HEADERS="Authorization,Content-Type",
    )
    main_module = _load_main_module()

    client = TestClient(main_module.app)
    response = client.get("/health", headers={"Origin": "https://example.com"})

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "https://example.com"
