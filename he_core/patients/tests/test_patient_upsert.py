from datetime import date

import pytest

from he_core.patients.models import Patient
from he_core.patients.services import PatientService
from he_core.tests.helpers import scoped

pytestmark = pytest.mark.django_db


def test_upsert_creates_patient(api_client, tenant, hospital):
    payload = {
        "patient_id_external": "P-100",
        "assigning_authority": "MAIN",
        "mrn": "M100",
        "family_name": "Smith",
        "given_name": "Ann",
        "dob_ts": "19600102",
        "sex": "F",
        "first_seen_hospital_code": "MAIN",
    }
    res = api_client.post("/api/patients/upsert/", payload, format="json", **scoped(tenant))

    assert res.status_code == 200, res.content
    body = res.json()
    assert body["success"] is True
    assert body["message"] == "Patient upserted successfully"

    p = Patient.objects.get(id=body["patient_key"])
    assert p.tenant_id == tenant.id
    assert p.dob == date(1960, 1, 2)
    assert p.first_seen_hospital_id == hospital.id


def test_upsert_is_idempotent_on_natural_key(api_client, tenant):
    payload = {"patient_id_external": "P-200", "family_name": "Old"}
    first = api_client.post("/api/patients/upsert/", payload, format="json", **scoped(tenant)).json()

    payload["family_name"] = "New"
    second = api_client.post("/api/patients/upsert/", payload, format="json", **scoped(tenant)).json()

    assert first["patient_key"] == second["patient_key"]
    assert Patient.objects.filter(tenant=tenant, patient_id_external="P-200").count() == 1
    assert Patient.objects.get(id=first["patient_key"]).family_name == "New"


def test_absent_fields_keep_existing_values(tenant):
    key = PatientService.upsert(tenant_id=tenant.id, patient_id_external="P-300", mrn="M300", city="Austin").key

    result = PatientService.upsert(tenant_id=tenant.id, patient_id_external="P-300", city="Dallas")

    assert result.success
    p = Patient.objects.get(id=key)
    assert p.mrn == "M300"
    assert p.city == "Dallas"


def test_authority_is_part_of_the_natural_key(tenant):
    a = PatientService.upsert(tenant_id=tenant.id, patient_id_external="P-400", assigning_authority="A")
    b = PatientService.upsert(tenant_id=tenant.id, patient_id_external="P-400", assigning_authority=" B ")
    blank = PatientService.upsert(tenant_id=tenant.id, patient_id_external="P-400")

    assert len({a.key, b.key, blank.key}) == 3
    assert Patient.objects.get(id=b.key).assigning_authority == "B"


def test_first_seen_hospital_is_set_once(tenant, hospital):
    from he_core.hospitals.models import Hospital

    other = Hospital.objects.create(tenant=tenant, hospital_code="EAST", hospital_name="East")
    key = PatientService.upsert(tenant_id=tenant.id, patient_id_external="P-500", first_seen_hospital_code="MAIN").key
    PatientService.upsert(tenant_id=tenant.id, patient_id_external="P-500", first_seen_hospital_code="EAST")

    assert Patient.objects.get(id=key).first_seen_hospital_id == hospital.id
    assert other.id != hospital.id


def test_same_external_id_in_two_tenants_is_two_patients(tenant, other_tenant):
    a = PatientService.upsert(tenant_id=tenant.id, patient_id_external="P-600")
    b = PatientService.upsert(tenant_id=other_tenant.id, patient_id_external="P-600")

    assert a.key != b.key


def test_unknown_tenant_is_reported_not_raised():
    result = PatientService.upsert(tenant_id=987654, patient_id_external="P-700")

    assert result.success is False
    assert result.message.startswith("Error:")
    assert "does not exist" in result.message
    assert result.key is None


def test_blank_external_id_is_reported(tenant):
    result = PatientService.upsert(tenant_id=tenant.id, patient_id_external="   ")

    assert result.success is False
    assert "PatientIdExternal is required" in result.message


def test_invalid_dob_timestamp_is_400(api_client, tenant):
    res = api_client.post(
        "/api/patients/upsert/",
        {"patient_id_external": "P-800", "dob_ts": "1960-01-02"},
        format="json",
        **scoped(tenant),
    )

    assert res.status_code == 400
    assert "dob_ts" in res.json()["error"]["details"]


def test_body_tenant_key_must_match_header(api_client, tenant, other_tenant):
    res = api_client.post(
        "/api/patients/upsert/",
        {"tenant_key": other_tenant.id, "patient_id_external": "P-900"},
        format="json",
        **scoped(tenant),
    )

    assert res.status_code == 403
