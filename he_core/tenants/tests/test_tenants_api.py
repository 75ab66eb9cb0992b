import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from he_core.tenants.models import Tenant
from he_core.tenants.services import TenantService

pytestmark = pytest.mark.django_db


@pytest.fixture
def staff_client(db):
    staff = get_user_model().objects.create_user(username="ops", password="x", is_staff=True)
    c = APIClient()
    c.force_authenticate(user=staff)
    return c


def test_staff_creates_tenant_with_slug_code(staff_client):
    res = staff_client.post("/api/tenants/", {"tenant_name": "Acme Health"}, format="json")

    assert res.status_code == 201
    body = res.json()
    assert body["tenant_code"] == "acme-health"
    assert body["is_active"] is True
    assert Tenant.objects.filter(id=body["tenant_key"]).exists()


def test_duplicate_code_is_400(staff_client, tenant):
    res = staff_client.post(
        "/api/tenants/",
        {"tenant_name": "Again", "tenant_code": tenant.tenant_code},
        format="json",
    )

    assert res.status_code == 400


def test_tenant_admin_is_not_staff(api_client):
    res = api_client.get("/api/tenants/")

    assert res.status_code == 403


def test_set_active_is_idempotent(staff_client, tenant):
    url = f"/api/tenants/{tenant.id}/set-active/"

    assert staff_client.post(url, {"is_active": False}, format="json").json()["is_active"] is False
    assert staff_client.post(url, {"is_active": False}, format="json").json()["is_active"] is False


def test_inactive_tenant_denies_members(api_client, tenant):
    TenantService.set_active(tenant_id=tenant.id, is_active=False)

    res = api_client.get("/api/patients/", HTTP_X_TENANT_ID=str(tenant.id))

    assert res.status_code == 403
