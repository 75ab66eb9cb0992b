import pytest

from he_core.patients.models import Patient
from he_core.tests.helpers import scoped

pytestmark = pytest.mark.django_db


def test_retrieve_patient(api_client, tenant, patient):
    res = api_client.get(f"/api/patients/{patient.id}/", **scoped(tenant))

    assert res.status_code == 200
    body = res.json()
    assert body["patient_key"] == patient.id
    assert body["tenant_key"] == tenant.id
    assert body["family_name"] == "Doe"


def test_patient_from_other_tenant_is_404(api_client, tenant, other_tenant):
    foreign = Patient.objects.create(tenant=other_tenant, patient_id_external="X-1")

    res = api_client.get(f"/api/patients/{foreign.id}/", **scoped(tenant))

    assert res.status_code == 404


def test_list_by_tenant_pages_with_skip_take(api_client, tenant):
    for i in range(5):
        Patient.objects.create(tenant=tenant, patient_id_external=f"E-{i}")

    res = api_client.get(f"/api/patients/tenant/{tenant.id}/?skip=1&take=2")

    assert res.status_code == 200
    assert len(res.json()) == 2


def test_list_is_most_recently_updated_first(api_client, tenant):
    a = Patient.objects.create(tenant=tenant, patient_id_external="A")
    b = Patient.objects.create(tenant=tenant, patient_id_external="B")
    a.city = "Touched"
    a.save()

    res = api_client.get("/api/patients/", **scoped(tenant))

    keys = [p["patient_key"] for p in res.json()]
    assert keys[:2] == [a.id, b.id]


def test_negative_skip_is_400(api_client, tenant):
    res = api_client.get("/api/patients/?skip=-1", **scoped(tenant))

    assert res.status_code == 400


def test_take_is_capped(api_client, tenant, settings):
    settings.HE_MAX_TAKE = 2
    for i in range(4):
        Patient.objects.create(tenant=tenant, patient_id_external=f"C-{i}")

    res = api_client.get("/api/patients/?take=50", **scoped(tenant))

    assert len(res.json()) == 2


def test_search_filters_by_name(api_client, tenant):
    Patient.objects.create(tenant=tenant, patient_id_external="S-1", family_name="Rivera")
    Patient.objects.create(tenant=tenant, patient_id_external="S-2", family_name="Chen")

    res = api_client.get("/api/patients/?q=riv", **scoped(tenant))

    assert [p["family_name"] for p in res.json()] == ["Rivera"]
