"""
Shared test fixtures for the sigapi test suite.
"""

import pytest

from sigapi import DocContext, Settings, SignatureConfig, reset_openapi


@pytest.fixture(autouse=True)
def _clean_default_context():
    """Module-level helpers share one context; start every test empty."""
    reset_openapi()
    yield
    reset_openapi()


@pytest.fixture
def docs():
    """Isolated documentation context."""
    return DocContext()


@pytest.fixture
def strict_docs():
    """Context failing on dropped type arguments and path mismatches."""
    return DocContext(Settings(signature=SignatureConfig(
        strict_type_arguments=True,
        strict_path_parameters=True,
    )))


# ============================================================================
# ASGI helpers
# ============================================================================

async def call_asgi(app, path: str, method: str = "GET"):
    """Run one HTTP request through an ASGI app; returns (status, headers, body)."""
    sent = []

    async def receive():
        return {"type": "http.request", "body": b"", "more_body": False}

    async def send(message):
        sent.append(message)

    scope = {
        "type": "http",
        "method": method,
        "path": path,
        "headers": [],
        "query_string": b"",
    }
    await app(scope, receive, send)

    start = next(m for m in sent if m["type"] == "http.response.start")
    body = b"".join(m.get("body", b"") for m in sent if m["type"] == "http.response.body")
    return start["status"], dict(start["headers"]), body
