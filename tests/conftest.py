"""
Test fixtures and configuration.
"""

import os
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from skeleton.config import JWTAuthConfig, Settings
from skeleton.infrastructure.auth import MultiTokenVerifier
from skeleton.infrastructure.monitoring import PrometheusMetricsSink
from skeleton.main import SkeletonApp, with_auth_verifier, with_metrics_sink
from tests.helpers import TEST_AUDIENCE, TEST_ISSUER, TEST_SECRET


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch) -> None:
    """Keep SKELETON_* variables from the host out of the tests."""
    for key in list(os.environ):
        if key.upper().startswith("SKELETON_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        listen_address="127.0.0.1:0",
        metrics_enabled=False,
        shutdown_timeout=2,
        read_timeout=1,
        write_timeout=2,
    )


@pytest.fixture
def metrics_sink() -> PrometheusMetricsSink:
    return PrometheusMetricsSink()


@pytest.fixture
def skeleton_app(settings, metrics_sink) -> SkeletonApp:
    """Application without authentication."""
    return SkeletonApp(
        settings,
        with_metrics_sink(metrics_sink),
        with_auth_verifier(None),
    )


@pytest.fixture
def client(skeleton_app) -> Iterator[TestClient]:
    with TestClient(skeleton_app.api) as test_client:
        yield test_client


@pytest.fixture
def jwt_auth_config() -> JWTAuthConfig:
    return JWTAuthConfig(
        audience=TEST_AUDIENCE,
        issuer=TEST_ISSUER,
        secret=TEST_SECRET,
    )


@pytest.fixture
def auth_app(settings, metrics_sink, jwt_auth_config) -> SkeletonApp:
    """Application requiring HS256 tokens from the test issuer."""
    return SkeletonApp(
        settings,
        with_metrics_sink(metrics_sink),
        with_auth_verifier(MultiTokenVerifier.from_configs([jwt_auth_config])),
    )


@pytest.fixture
def auth_client(auth_app) -> Iterator[TestClient]:
    with TestClient(auth_app.api) as test_client:
        yield test_client

