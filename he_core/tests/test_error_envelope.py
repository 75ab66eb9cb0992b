import pytest
from rest_framework.test import APIClient

from he_core.tests.helpers import scoped

pytestmark = pytest.mark.django_db


def test_missing_tenant_returns_error_envelope(api_client):
    res = api_client.get("/api/patients/")

    assert res.status_code == 400
    body = res.json()
    assert body["error"]["code"] == "validation_error"
    assert "Tenant not specified" in body["error"]["message"]
    assert body["error"]["request_id"]


def test_request_id_is_echoed_in_envelope_and_header(api_client):
    res = api_client.get("/api/patients/", HTTP_X_REQUEST_ID="req-123")

    assert res.status_code == 400
    assert res.json()["error"]["request_id"] == "req-123"
    assert res["X-Request-Id"] == "req-123"


def test_invalid_tenant_header_is_400(api_client):
    res = api_client.get("/api/patients/", HTTP_X_TENANT_ID="abc")

    assert res.status_code == 400
    body = res.json()
    assert body["error"]["code"] == "validation_error"
    assert "X-Tenant-Id" in body["error"]["details"]


def test_unauthenticated_is_401_envelope():
    res = APIClient().get("/api/patients/")

    assert res.status_code == 401
    assert res.json()["error"]["code"] == "not_authenticated"


def test_not_found_uses_envelope(api_client, tenant):
    res = api_client.get("/api/patients/999999/", **scoped(tenant))

    assert res.status_code == 404
    body = res.json()
    assert body["error"]["code"] == "not_found"
    assert body["error"]["message"] == "Patient not found in this tenant."


def test_health_is_public():
    res = APIClient().get("/health/")

    assert res.status_code == 200
    assert res.json()["status"] == "healthy"
