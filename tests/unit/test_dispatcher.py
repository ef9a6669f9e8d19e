"""
Unit tests for the request dispatcher.

Exercises wrap_api_call through a minimal app so every outcome is
observed over HTTP.

Usage:
    pytest tests/unit/test_dispatcher.py
"""

import asyncio
import logging
import time
from typing import List

import pytest
from fastapi.testclient import TestClient
from pydantic import BaseModel

from skeleton.config import Settings
from skeleton.domain.exceptions import ApiError
from skeleton.main import SkeletonApp, with_api_route, with_auth_verifier
from skeleton.presentation.api.dispatcher import decode_json_object
from skeleton.presentation.api.routes import ApiRoute


class Greeting(BaseModel):
    name: str
    excited: bool = False


class Reply(BaseModel):
    greeting: str


class RecordingHandler:
    """Handler recording every payload it receives."""

    def __init__(self, result=None, error: Exception = None, delay: float = 0.0):
        self.calls: List = []
        self.result = result
        self.error = error
        self.delay = delay

    def __call__(self, payload):
        self.calls.append(payload)
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.result if self.result is not None else dict(payload)


def greet(greeting: Greeting) -> Reply:
    suffix = "!" if greeting.excited else "."
    return Reply(greeting=f"hello {greeting.name}{suffix}")


class TestWrapApiCall:
    """Unit tests for wrap_api_call."""

    @pytest.fixture
    def settings(self) -> Settings:
        return Settings(
            listen_address="127.0.0.1:0",
            metrics_enabled=False,
            read_timeout=0.2,
            write_timeout=0.3,
        )

    def _client(self, settings, *routes: ApiRoute) -> TestClient:
        app = SkeletonApp(
            settings,
            with_auth_verifier(None),
            *[with_api_route(route) for route in routes],
        )
        return TestClient(app.api)

    # ================================================================
    # Decoding
    # ================================================================

    @pytest.mark.parametrize(
        "body, expected",
        [
            (b"", "invalid JSON body"),
            (b"{not json", "invalid JSON body"),
            (b"[1, 2]", "got array"),
            (b'"text"', "got string"),
            (b"42", "got number"),
            (b"null", "got null"),
            (b"\xff\xfe\x00", "invalid JSON body"),
            (b'{"a": NaN}', "unsupported constant NaN"),
            (b'{"a": Infinity}', "unsupported constant Infinity"),
            (b'{"a": -Infinity}', "unsupported constant -Infinity"),
            pytest.param(
                b'{"a": ' + b"[" * 100000, "invalid JSON body", id="deeply-nested"
            ),
        ],
    )
    def test_decode_failure_short_circuits(self, settings, body, expected):
        """Test bodies that are not JSON objects never reach the handler."""
        handler = RecordingHandler()
        client = self._client(settings, ApiRoute("/recording", handler))

        response = client.post("/api/recording", content=body)

        assert response.status_code == 400
        assert expected in response.json()["error"]
        assert handler.calls == []

    def test_handler_receives_mapping(self, settings):
        handler = RecordingHandler(result={"ok": True})
        client = self._client(settings, ApiRoute("/recording", handler))

        response = client.post("/api/recording", json={"a": [1, 2]})

        assert response.status_code == 200
        assert response.json() == {"ok": True}
        assert handler.calls == [{"a": [1, 2]}]

    # ================================================================
    # Handler outcomes
    # ================================================================

    def test_handler_error(self, settings):
        handler = RecordingHandler(error=ApiError("widget unavailable"))
        client = self._client(settings, ApiRoute("/recording", handler))

        response = client.post("/api/recording", json={})

        assert response.status_code == 500
        assert response.json() == {"error": "widget unavailable"}

    def test_unexpected_exception(self, settings):
        handler = RecordingHandler(error=KeyError("missing"))
        client = self._client(settings, ApiRoute("/recording", handler))

        response = client.post("/api/recording", json={})

        assert response.status_code == 500
        assert response.json() == {"error": "'missing'"}

    def test_non_mapping_result(self, settings):
        handler = RecordingHandler(result=[1, 2, 3])
        client = self._client(settings, ApiRoute("/recording", handler))

        response = client.post("/api/recording", json={})

        assert response.status_code == 500
        assert "expected a mapping" in response.json()["error"]

    def test_write_timeout(self, settings):
        handler = RecordingHandler(delay=2.0)
        client = self._client(settings, ApiRoute("/slow", handler))

        started = time.monotonic()
        response = client.post("/api/slow", json={})
        elapsed = time.monotonic() - started

        assert response.status_code == 500
        assert response.json() == {"error": "handler timed out after 0.3s"}
        assert elapsed < 1.5

    def test_handler_timeout_error_keeps_message(self, settings):
        """Test a TimeoutError raised by the handler is not reported as a write timeout."""
        handler = RecordingHandler(error=TimeoutError("upstream took too long"))
        client = self._client(settings, ApiRoute("/recording", handler))

        response = client.post("/api/recording", json={})

        assert response.status_code == 500
        assert response.json() == {"error": "upstream took too long"}

    # ================================================================
    # Typed handlers
    # ================================================================

    def test_schema(self, settings):
        client = self._client(settings, ApiRoute("/greet", greet, schema=Greeting))

        response = client.post("/api/greet", json={"name": "ada", "excited": True})

        assert response.status_code == 200
        assert response.json() == {"greeting": "hello ada!"}

    def test_schema_validation_failure(self, settings):
        client = self._client(settings, ApiRoute("/greet", greet, schema=Greeting))

        response = client.post("/api/greet", json={"excited": True})

        assert response.status_code == 400
        assert "name" in response.json()["error"]

    # ================================================================
    # Error reporting
    # ================================================================

    def test_errors_reach_request_log(self, settings, caplog):
        handler = RecordingHandler(error=ApiError("widget unavailable"))
        client = self._client(settings, ApiRoute("/recording", handler))

        with caplog.at_level(logging.INFO):
            client.post("/api/recording", json={})

        records = [r for r in caplog.records if r.getMessage() == "errors on API request"]
        assert len(records) == 1
        assert records[0].levelno == logging.ERROR
        assert records[0].fields["errors"] == ["widget unavailable"]
        assert records[0].fields["status-code"] == 500
        assert records[0].fields["path"] == "/api/recording"

    def test_success_logged_at_info(self, settings, caplog):
        client = self._client(settings, ApiRoute("/recording", RecordingHandler()))

        with caplog.at_level(logging.INFO):
            client.post("/api/recording?trace=1", json={"a": 1})

        records = [r for r in caplog.records if r.getMessage() == "api call complete"]
        assert len(records) == 1
        assert records[0].levelno == logging.INFO
        assert records[0].fields["query"] == "trace=1"
        assert "errors" not in records[0].fields


class StubBodyRequest:
    """Request stand-in whose body arrives after `delay` seconds."""

    def __init__(self, body: bytes, delay: float = 0.0):
        self._body = body
        self.delay = delay

    async def body(self) -> bytes:
        await asyncio.sleep(self.delay)
        return self._body


class TestDecodeJsonObject:
    """Unit tests for decode_json_object."""

    async def test_decodes_object(self):
        payload = await decode_json_object(StubBodyRequest(b'{"a": 1}'), read_timeout=1)
        assert payload == {"a": 1}

    async def test_read_timeout(self):
        """Test a body that arrives too slowly times out."""
        started = time.monotonic()

        with pytest.raises(asyncio.TimeoutError):
            await decode_json_object(StubBodyRequest(b"{}", delay=5), read_timeout=0.1)

        assert time.monotonic() - started < 1
