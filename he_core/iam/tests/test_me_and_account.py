import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from he_core.iam.models import Account, MemberRole, Membership
from he_core.iam.services.membership import invite_member
from he_core.tenants.models import Tenant

pytestmark = pytest.mark.django_db


@pytest.fixture
def newcomer(db):
    return get_user_model().objects.create_user(username="new", email="New@Example.com", password="x")


@pytest.fixture
def newcomer_client(newcomer):
    c = APIClient()
    c.force_authenticate(user=newcomer)
    return c


def test_me_tenants_requires_auth():
    assert APIClient().get("/api/me/tenants/").status_code == 401


def test_me_tenants_lists_active_memberships(api_client, tenant):
    res = api_client.get("/api/me/tenants/")

    assert res.status_code == 200
    assert res.json() == [
        {
            "tenant_key": tenant.id,
            "tenant_code": "test-tenant",
            "tenant_name": "Test Tenant",
            "member_key": Membership.objects.get(tenant=tenant, email="testuser@example.com").id,
            "role": "Admin",
            "is_active": True,
            "pending": False,
        }
    ]


def test_pending_invite_shows_and_activates(newcomer, newcomer_client, tenant, other_tenant):
    invite_member(tenant_id=tenant.id, email="new@example.com", role=MemberRole.MEMBER)
    invite_member(tenant_id=other_tenant.id, email="new@example.com", role=MemberRole.ADMIN)

    options = newcomer_client.get("/api/me/tenants/").json()
    assert {o["tenant_key"] for o in options} == {tenant.id, other_tenant.id}
    assert all(o["pending"] for o in options)

    res = newcomer_client.post("/api/me/activate-invitations/")
    assert res.status_code == 200
    assert sorted(res.json()["activated_tenant_keys"]) == sorted([tenant.id, other_tenant.id])

    m = Membership.objects.get(tenant=other_tenant, email="new@example.com")
    assert m.user_id == newcomer.id
    assert m.is_active is True
    assert m.activated_at is not None

    # nothing left to claim
    assert newcomer_client.post("/api/me/activate-invitations/").json()["activated_tenant_keys"] == []


def test_account_setup_creates_tenant_and_admin_seat(newcomer, newcomer_client):
    res = newcomer_client.post(
        "/api/account/",
        {"organization": "Lakeside Clinic", "organization_type": "Clinic", "city": "Austin"},
        format="json",
    )

    assert res.status_code == 201, res.content
    body = res.json()
    assert body["tenant_code"] == "lakeside-clinic"
    assert body["email"] == "new@example.com"

    tenant = Tenant.objects.get(id=body["tenant_key"])
    m = Membership.objects.get(tenant=tenant, user=newcomer)
    assert m.role == MemberRole.ADMIN
    assert m.is_active is True


def test_account_setup_twice_is_400(newcomer_client):
    newcomer_client.post("/api/account/", {"organization": "One"}, format="json")
    res = newcomer_client.post("/api/account/", {"organization": "Two"}, format="json")

    assert res.status_code == 400
    assert Account.objects.count() == 1
    assert not Tenant.objects.filter(tenant_name="Two").exists()


def test_account_setup_with_taken_code_rolls_back(newcomer_client, tenant):
    res = newcomer_client.post(
        "/api/account/",
        {"organization": "Copycat", "tenant_code": tenant.tenant_code},
        format="json",
    )

    assert res.status_code == 400
    assert Account.objects.count() == 0


def test_account_get_and_patch(newcomer_client):
    assert newcomer_client.get("/api/account/").status_code == 404

    newcomer_client.post("/api/account/", {"organization": "Lakeside"}, format="json")
    res = newcomer_client.patch("/api/account/", {"organization_phone": "555-0101", "state": "TX"}, format="json")

    assert res.status_code == 200
    body = res.json()
    assert body["organization_phone"] == "555-0101"
    assert body["state"] == "TX"
    assert newcomer_client.get("/api/account/").json()["organization"] == "Lakeside"


def test_organization_name_for_tenant(newcomer_client):
    from he_core.iam.services.account import organization_name_for_tenant

    body = newcomer_client.post("/api/account/", {"organization": "Lakeside"}, format="json").json()

    assert organization_name_for_tenant(tenant_id=body["tenant_key"]) == "Lakeside"
    assert organization_name_for_tenant(tenant_id=999999) is None
