from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from booking_api.core.app_factory import create_app


@pytest.fixture
def client() -> TestClient:
    return TestClient(create_app(acuity_client=None))


def test_preserves_incoming_request_id_header(client: TestClient):
    incoming_id = "test-request-id-123"
    resp = client.get("/health", headers={"X-Request-ID": incoming_id})

    assert resp.status_code == 200
    assert resp.headers.get("X-Request-ID") == incoming_id


def test_generates_request_id_when_missing(client: TestClient):
    resp = client.get("/health")

    assert resp.status_code == 200
    generated = resp.headers.get("X-Request-ID")
    assert generated
    assert len(generated) == 36

    assert resp.headers.get("X-Request-Duration-ms") is not None


def test_fallback_response_echoes_request_id(client: TestClient):
    resp = client.get("/api/services", headers={"X-Request-ID": "fallback-req"})

    assert resp.status_code == 503
    assert resp.headers.get("X-Request-ID") == "fallback-req"
