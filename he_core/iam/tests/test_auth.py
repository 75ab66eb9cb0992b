import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

pytestmark = pytest.mark.django_db


def test_token_without_tenant(user):
    res = APIClient().post("/api/auth/token/", {"username": "testuser", "password": "testpass"}, format="json")

    assert res.status_code == 200, res.content
    body = res.json()
    assert body["username"] == "testuser"
    assert body["tenant_id"] is None
    assert body["access"] and body["refresh"] and body["expires"]
    assert AccessToken(body["access"]).get("tenant_id") is None


def test_token_bound_to_member_tenant(user, tenant):
    res = APIClient().post(
        "/api/auth/token/",
        {"username": "testuser", "password": "testpass", "tenant_id": tenant.id},
        format="json",
    )

    assert res.status_code == 200
    body = res.json()
    assert body["tenant_id"] == tenant.id
    assert AccessToken(body["access"])["tenant_id"] == tenant.id


def test_token_for_foreign_tenant_is_403(user, other_tenant):
    res = APIClient().post(
        "/api/auth/token/",
        {"username": "testuser", "password": "testpass", "tenant_id": other_tenant.id},
        format="json",
    )

    assert res.status_code == 403


def test_bad_password_is_401(user):
    res = APIClient().post("/api/auth/token/", {"username": "testuser", "password": "nope"}, format="json")

    assert res.status_code == 401
    assert res.json()["error"]["code"] == "authentication_failed"


def test_refresh_keeps_tenant_binding(user, tenant):
    c = APIClient()
    issued = c.post(
        "/api/auth/token/",
        {"username": "testuser", "password": "testpass", "tenant_id": tenant.id},
        format="json",
    ).json()

    res = c.post("/api/auth/refresh/", {"refresh": issued["refresh"]}, format="json")

    assert res.status_code == 200
    body = res.json()
    assert body["tenant_id"] == tenant.id
    assert body["username"] == "testuser"


def test_bound_token_reads_without_header(user, tenant, patient):
    c = APIClient()
    access = c.post(
        "/api/auth/token/",
        {"username": "testuser", "password": "testpass", "tenant_id": tenant.id},
        format="json",
    ).json()["access"]

    c.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
    res = c.get(f"/api/patients/{patient.id}/")

    assert res.status_code == 200


def test_invalid_refresh_is_401(user):
    res = APIClient().post("/api/auth/refresh/", {"refresh": "not-a-token"}, format="json")

    assert res.status_code == 401
    assert res.json()["error"]["code"] == "token_not_valid"
