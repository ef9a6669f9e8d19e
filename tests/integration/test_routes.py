"""
Integration tests for the HTTP surface.

Covers the reference routes, framework errors and latency metrics
through the composed FastAPI app.

Usage:
    pytest tests/integration/test_routes.py
"""

import asyncio
import time
from datetime import datetime

import httpx
import jwt
import pytest

from skeleton.config import JWTAuthConfig
from skeleton.domain.scopes import create_scopes
from skeleton.infrastructure.auth import MultiTokenVerifier
from skeleton.main import SkeletonApp, with_auth_verifier
from tests.helpers import (
    TEST_AUDIENCE,
    TEST_ISSUER,
    bearer,
    latency_sample_count,
    make_token,
)


class TestApiRoutes:
    """Integration tests for /api/echo and /api/error."""

    # ================================================================
    # Echo
    # ================================================================

    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"a": 1},
            {"nested": {"list": [1, "two", None, True]}, "float": 1.5},
        ],
    )
    def test_echo_returns_request(self, client, payload):
        response = client.post("/api/echo", json=payload)

        assert response.status_code == 200
        assert response.json() == payload

    def test_echo_rejects_non_object(self, client):
        response = client.post("/api/echo", content=b"[1, 2, 3]")

        assert response.status_code == 400
        assert "error" in response.json()

    def test_echo_rejects_malformed_json(self, client):
        response = client.post(
            "/api/echo",
            content=b'{"a": ',
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400

    # ================================================================
    # Error
    # ================================================================

    @pytest.mark.parametrize("payload", [{}, {"a": 1}, {"error": "mine"}])
    def test_error_is_constant(self, client, payload):
        response = client.post("/api/error", json=payload)

        assert response.status_code == 500
        assert response.json() == {"error": "bad times"}

    def test_error_rejects_malformed_json(self, client):
        response = client.post("/api/error", content=b"nope")

        assert response.status_code == 400

    def test_get_not_allowed(self, client):
        response = client.get("/api/echo")

        assert response.status_code == 405
        assert "message" in response.json()


class TestServiceRoutes:
    """Integration tests for health, version and unknown routes."""

    def test_liveness(self, client):
        response = client.get("/_health/liveness")

        assert response.status_code == 200
        assert datetime.fromisoformat(response.json()["time"]).tzinfo is not None

    def test_version(self, client, monkeypatch):
        monkeypatch.setenv("SKELETON_GIT_COMMIT", "abc123")

        response = client.get("/api/version")

        assert response.status_code == 200
        assert response.json()["git_commit"] == "abc123"

    @pytest.mark.parametrize("method", ["GET", "POST", "DELETE"])
    def test_unknown_route(self, client, method):
        response = client.request(method, "/nowhere/to/be/found")

        assert response.status_code == 404
        assert response.json() == {"message": "invalid request - route not found"}


class TestLatencyMetrics:
    """Integration tests for request latency observation."""

    def test_echo_calls_counted(self, client, metrics_sink):
        before = latency_sample_count(metrics_sink, "/api/echo", 200)

        for i in range(5):
            client.post("/api/echo", json={"i": i})

        assert latency_sample_count(metrics_sink, "/api/echo", 200) == before + 5

    def test_status_code_label(self, client, metrics_sink):
        client.post("/api/error", json={})
        client.post("/api/echo", content=b"[]")
        client.get("/missing")

        assert latency_sample_count(metrics_sink, "/api/error", 500) == 1
        assert latency_sample_count(metrics_sink, "/api/echo", 400) == 1
        assert latency_sample_count(metrics_sink, "/missing", 404) == 1

    def test_health_counted(self, client, metrics_sink):
        client.get("/_health/liveness")

        assert latency_sample_count(metrics_sink, "/_health/liveness", 200) == 1


class TestAuth:
    """Integration tests for scope-gated routes."""

    def test_missing_token(self, auth_client):
        response = auth_client.post("/api/echo", json={"a": 1})

        assert response.status_code == 401
        assert response.json() == {"message": "missing bearer token"}
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_invalid_token(self, auth_client):
        response = auth_client.post(
            "/api/echo", json={"a": 1}, headers=bearer("not-a-jwt")
        )

        assert response.status_code == 401
        assert response.json()["message"].startswith("invalid token")

    def test_expired_token(self, auth_client):
        token = make_token(create_scopes("response"), expires_in=-60)

        response = auth_client.post("/api/echo", json={}, headers=bearer(token))

        assert response.status_code == 401
        assert response.json() == {"message": "token expired"}

    def test_insufficient_scope(self, auth_client):
        token = make_token(["read"])

        response = auth_client.post("/api/echo", json={"a": 1}, headers=bearer(token))

        assert response.status_code == 403
        assert "message" in response.json()

    @pytest.mark.parametrize("scope", ["write", "create", "create:response"])
    def test_any_accepted_scope(self, auth_client, scope):
        token = make_token([scope])

        response = auth_client.post("/api/echo", json={"a": 1}, headers=bearer(token))

        assert response.status_code == 200
        assert response.json() == {"a": 1}

    def test_auth_checked_before_decoding(self, auth_client):
        response = auth_client.post("/api/echo", content=b"not json")

        assert response.status_code == 401

    def test_open_routes_need_no_token(self, auth_client):
        assert auth_client.get("/_health/liveness").status_code == 200
        assert auth_client.get("/api/version").status_code == 200

    def test_denied_requests_counted(self, auth_client, metrics_sink):
        auth_client.post("/api/echo", json={})

        assert latency_sample_count(metrics_sink, "/api/echo", 401) == 1


class TestJwksAuth:
    """Integration tests for issuers whose keys come from a JWKS endpoint."""

    @pytest.fixture
    def jwks_app(self, settings, monkeypatch) -> SkeletonApp:
        def slow_key_fetch(self, token):
            time.sleep(1.0)
            raise jwt.PyJWKClientError("Fail to fetch data from the url")

        monkeypatch.setattr(jwt.PyJWKClient, "get_signing_key_from_jwt", slow_key_fetch)
        config = JWTAuthConfig(
            audience=TEST_AUDIENCE,
            issuer=TEST_ISSUER,
            jwks_uri="https://issuer.skeleton.test/.well-known/jwks.json",
        )
        return SkeletonApp(
            settings, with_auth_verifier(MultiTokenVerifier.from_configs([config]))
        )

    async def test_key_fetch_does_not_block_other_requests(self, jwks_app):
        transport = httpx.ASGITransport(app=jwks_app.api)
        async with httpx.AsyncClient(
            transport=transport, base_url="http://skeleton.test"
        ) as client:
            protected = asyncio.create_task(
                client.post(
                    "/api/echo", json={"a": 1}, headers=bearer(make_token(["write"]))
                )
            )
            await asyncio.sleep(0.2)

            started = time.monotonic()
            liveness = await client.get("/_health/liveness")
            elapsed = time.monotonic() - started

            response = await protected

        assert liveness.status_code == 200
        assert elapsed < 0.5
        assert response.status_code == 401
        assert response.json()["message"].startswith("invalid token")
