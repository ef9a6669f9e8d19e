"""
Shared test helpers: signed tokens and metric lookups.
"""

import time
from typing import Dict, List, Optional

import jwt

from skeleton.infrastructure.monitoring import PrometheusMetricsSink

TEST_SECRET = "skeleton-test-secret-0123456789abcdef"
TEST_AUDIENCE = "skeleton-test"
TEST_ISSUER = "https://issuer.skeleton.test/"


def make_token(
    scopes: Optional[List[str]] = None,
    secret: str = TEST_SECRET,
    audience: str = TEST_AUDIENCE,
    issuer: str = TEST_ISSUER,
    expires_in: int = 300,
    subject: str = "user-1",
) -> str:
    """Sign a test token carrying `scopes` as a space-delimited claim."""
    now = int(time.time())
    claims = {
        "sub": subject,
        "aud": audience,
        "iss": issuer,
        "iat": now,
        "exp": now + expires_in,
        "scope": " ".join(scopes or []),
    }
    return jwt.encode(claims, secret, algorithm="HS256")


def bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def latency_sample_count(
    sink: PrometheusMetricsSink, endpoint: str, status_code: int
) -> float:
    """Latency observations recorded for an endpoint/status pair (0.0 if none)."""
    value = sink.registry.get_sample_value(
        f"{sink.namespace}_api_latency_seconds_count",
        {"endpoint": endpoint, "response_code": str(status_code)},
    )
    return value or 0.0
