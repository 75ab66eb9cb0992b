import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from he_core.tests.helpers import scoped

pytestmark = pytest.mark.django_db


def test_header_resolves_tenant(api_client, tenant, patient):
    res = api_client.get(f"/api/patients/{patient.id}/", **scoped(tenant))

    assert res.status_code == 200
    assert res.json()["patient_key"] == patient.id


def test_query_param_resolves_tenant(api_client, tenant, patient):
    res = api_client.get(f"/api/patients/{patient.id}/?tenantKey={tenant.id}")

    assert res.status_code == 200


def test_token_claim_resolves_tenant(user, tenant, patient):
    refresh = RefreshToken.for_user(user)
    refresh["tenant_id"] = tenant.id

    c = APIClient()
    c.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
    res = c.get(f"/api/patients/{patient.id}/")

    assert res.status_code == 200


def test_header_wins_over_claim(user, tenant, other_tenant, patient):
    refresh = RefreshToken.for_user(user)
    refresh["tenant_id"] = tenant.id

    c = APIClient()
    c.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
    res = c.get(f"/api/patients/{patient.id}/", **scoped(other_tenant))

    # user is not a member of other_tenant
    assert res.status_code == 403


def test_non_member_gets_403(api_client, other_tenant):
    res = api_client.get("/api/patients/", **scoped(other_tenant))

    assert res.status_code == 403
    body = res.json()
    assert body["error"]["code"] == "permission_denied"
    assert "do not have access" in body["error"]["message"].lower()


def test_unknown_tenant_gets_403(api_client):
    res = api_client.get("/api/patients/", HTTP_X_TENANT_ID="987654")

    assert res.status_code == 403


def test_path_tenant_must_match_header(api_client, tenant, other_tenant):
    res = api_client.get(f"/api/patients/tenant/{other_tenant.id}/", **scoped(tenant))

    assert res.status_code == 403
    assert "does not match" in res.json()["error"]["message"]


def test_path_tenant_alone_is_enough(api_client, tenant, patient):
    res = api_client.get(f"/api/patients/tenant/{tenant.id}/")

    assert res.status_code == 200
    assert [p["patient_key"] for p in res.json()] == [patient.id]


def test_staff_bypasses_membership(db, other_tenant):
    from django.contrib.auth import get_user_model

    staff = get_user_model().objects.create_user(username="staff", password="x", is_staff=True)
    c = APIClient()
    c.force_authenticate(user=staff)

    res = c.get("/api/patients/", **scoped(other_tenant))

    assert res.status_code == 200
    assert res.json() == []


def test_inactive_membership_is_denied(api_client, user, tenant):
    user.memberships.filter(tenant=tenant).update(is_active=False)

    res = api_client.get("/api/patients/", **scoped(tenant))

    assert res.status_code == 403


def test_bad_tenant_claim_is_rejected(user):
    refresh = RefreshToken.for_user(user)
    refresh["tenant_id"] = "nope"

    c = APIClient()
    c.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
    res = c.get("/api/patients/")

    assert res.status_code == 401
