import pytest
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from rest_framework.test import APIClient

from he_core.iam.models import MemberRole, Membership
from he_core.iam.services import membership as svc
from he_core.tests.helpers import scoped

pytestmark = pytest.mark.django_db


def test_admin_invites_unknown_email(api_client, tenant, user):
    res = api_client.post(
        "/api/members/",
        {"email": "Nurse@Example.com", "first_name": "Nora"},
        format="json",
        **scoped(tenant),
    )

    assert res.status_code == 201
    body = res.json()
    assert body["email"] == "nurse@example.com"
    assert body["is_active"] is False
    assert body["user_key"] is None
    assert Membership.objects.get(id=body["member_key"]).invited_by_id == user.id


def test_admin_adds_existing_user_active_immediately(api_client, tenant):
    existing = get_user_model().objects.create_user(username="doc", email="doc@example.com", password="x")

    res = api_client.post("/api/members/", {"email": "doc@example.com", "role": "Admin"}, format="json", **scoped(tenant))

    assert res.status_code == 201
    body = res.json()
    assert body["is_active"] is True
    assert body["user_key"] == existing.id
    assert body["role"] == "Admin"


def test_duplicate_invite_is_400(api_client, tenant):
    api_client.post("/api/members/", {"email": "a@example.com"}, format="json", **scoped(tenant))
    res = api_client.post("/api/members/", {"email": "A@example.com"}, format="json", **scoped(tenant))

    assert res.status_code == 400
    assert "already" in res.json()["error"]["message"]


def test_member_can_list_but_not_invite(member_user, tenant):
    c = APIClient()
    c.force_authenticate(user=member_user)

    assert c.get("/api/members/", **scoped(tenant)).status_code == 200
    assert c.post("/api/members/", {"email": "z@example.com"}, format="json", **scoped(tenant)).status_code == 403


def test_set_role_and_deactivate(api_client, tenant, member_user):
    m = member_user.memberships.get(tenant=tenant)

    res = api_client.post(f"/api/members/{m.id}/set-role/", {"role": "Admin"}, format="json", **scoped(tenant))
    assert res.json()["role"] == "Admin"

    res = api_client.post(f"/api/members/{m.id}/deactivate/", **scoped(tenant))
    assert res.status_code == 200
    assert res.json()["is_active"] is False


def test_last_admin_cannot_be_demoted_or_deactivated(api_client, tenant, user):
    me = user.memberships.get(tenant=tenant)

    res = api_client.post(f"/api/members/{me.id}/set-role/", {"role": "Member"}, format="json", **scoped(tenant))
    assert res.status_code == 400

    res = api_client.post(f"/api/members/{me.id}/deactivate/", **scoped(tenant))
    assert res.status_code == 400


def test_deactivating_pending_invite_revokes_it(tenant):
    invite = svc.invite_member(tenant_id=tenant.id, email="gone@example.com")

    svc.deactivate_member(tenant_id=tenant.id, membership_id=invite.id)

    assert not Membership.objects.filter(email="gone@example.com").exists()


def test_member_of_other_tenant_is_404(api_client, tenant, other_tenant):
    foreign = Membership.objects.create(tenant=other_tenant, email="f@example.com", is_active=True)

    res = api_client.post(f"/api/members/{foreign.id}/deactivate/", **scoped(tenant))

    assert res.status_code == 404


def test_is_member_of_tenant(tenant, user):
    svc.invite_member(tenant_id=tenant.id, email="pending@example.com")

    assert svc.is_member_of_tenant(tenant_id=tenant.id, email="PENDING@example.com")
    assert svc.is_member_of_tenant(tenant_id=tenant.id, user_id=user.id)
    assert not svc.is_member_of_tenant(tenant_id=tenant.id, email="nobody@example.com")


def test_activate_member_rejects_claimed_invite(tenant):
    User = get_user_model()
    a = User.objects.create_user(username="a", email="shared@example.com", password="x")
    b = User.objects.create_user(username="b", email="shared@example.com", password="x")
    svc.invite_member(tenant_id=tenant.id, email="shared@example.com")
    svc.activate_member(tenant_id=tenant.id, email="shared@example.com", user=a)

    with pytest.raises(ValidationError):
        svc.activate_member(tenant_id=tenant.id, email="shared@example.com", user=b)


def test_invalid_role_is_rejected(tenant):
    with pytest.raises(ValidationError):
        svc.invite_member(tenant_id=tenant.id, email="r@example.com", role="Owner")


def test_list_members_puts_active_first(tenant, user):
    svc.invite_member(tenant_id=tenant.id, email="aaa@example.com")

    emails = [m.email for m in svc.list_members(tenant_id=tenant.id)]

    assert emails == ["testuser@example.com", "aaa@example.com"]
    assert MemberRole.ADMIN in {m.role for m in svc.list_members(tenant_id=tenant.id, include_inactive=False)}
