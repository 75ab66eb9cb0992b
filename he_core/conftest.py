# he_core/conftest.py
from datetime import date, datetime, timezone as dt_timezone

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from he_core.hospitals.models import Hospital
from he_core.iam.models import MemberRole, Membership
from he_core.patients.models import Patient
from he_core.tenants.models import Tenant


@pytest.fixture
def tenant(db):
    return Tenant.objects.create(tenant_code="test-tenant", tenant_name="Test Tenant")


@pytest.fixture
def other_tenant(db):
    return Tenant.objects.create(tenant_code="other-tenant", tenant_name="Other Tenant")


@pytest.fixture
def hospital(db, tenant):
    return Hospital.objects.create(tenant=tenant, hospital_code="MAIN", hospital_name="Main Hospital")


@pytest.fixture
def user(db, tenant):
    """
    Test user with an active Admin membership in `tenant`.
    """
    User = get_user_model()
    user = User.objects.create_user(
        username="testuser",
        email="testuser@example.com",
        password="testpass",
        first_name="Test",
        last_name="User",
        is_active=True,
    )

    Membership.objects.create(
        tenant=tenant,
        user=user,
        email=user.email,
        role=MemberRole.ADMIN,
        is_active=True,
        first_name=user.first_name,
        last_name=user.last_name,
    )
    return user


@pytest.fixture
def member_user(db, tenant):
    """
    Plain Member (non-admin) in `tenant`.
    """
    User = get_user_model()
    user = User.objects.create_user(username="member", email="member@example.com", password="testpass")
    Membership.objects.create(tenant=tenant, user=user, email=user.email, role=MemberRole.MEMBER, is_active=True)
    return user


@pytest.fixture
def api_client(user):
    c = APIClient()
    c.force_authenticate(user=user)
    return c


@pytest.fixture
def patient(db, tenant, hospital):
    return Patient.objects.create(
        tenant=tenant,
        patient_id_external="EXT-001",
        mrn="MRN-TEST-001",
        family_name="Doe",
        given_name="Jane",
        dob=date(1950, 3, 14),
        sex="F",
        first_seen_hospital=hospital,
    )


@pytest.fixture
def encounter(tenant, hospital, patient):
    """
    Admitted, not yet discharged.
    """
    from he_core.encounters.models import Encounter

    return Encounter.objects.create(
        tenant=tenant,
        hospital=hospital,
        patient=patient,
        visit_number="V-1001",
        admit_datetime=datetime(2025, 1, 5, 8, 30, tzinfo=dt_timezone.utc),
        patient_class="I",
    )
