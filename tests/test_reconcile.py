from datetime import datetime, timezone

import pytest

from triage_link.core.errors import ValidationError
from triage_link.core.reconcile import reconcile
from triage_link.models.canonical import Extraction, Vitals
from triage_link.transforms.inbound import to_extraction
from triage_link.transforms.outbound import from_document

NOW = datetime(2024, 7, 1, tzinfo=timezone.utc)


def test_new_record_from_age_only():
    record = reconcile(Extraction(full_name="Marcus Lee", age=42), None, NOW)
    assert record.dob == "1982-01-01"
    assert record.age == 42
    assert record.id
    assert record.chief_complaint == "Not reported"
    assert record.history_of_present_illness == "Not reported"
    assert record.reported_symptoms is None
    assert record.last_intake_date == "2024-07-01T00:00:00Z"


def test_new_record_uses_given_identifier():
    record = reconcile(Extraction(full_name="Marcus Lee"), None, NOW, record_id="patient-002")
    assert record.id == "patient-002"
    assert record.dob is None
    assert record.age is None


def test_new_record_dob_overrides_extracted_age():
    record = reconcile(Extraction(full_name="Renee Patel", dob="1995-09-01", age=40), None, NOW)
    assert record.dob == "1995-09-01"
    assert record.age == 28


def test_stored_dob_recomputes_age(existing_patient):
    existing = from_document(dict(existing_patient, age=30))
    record = reconcile(Extraction(full_name="Elena Ramírez"), existing, NOW)
    assert record.dob == "1982-03-10"
    assert record.age == 42


def test_stored_dob_birthday_not_reached(existing_patient):
    existing = from_document(dict(existing_patient, dob="1982-08-10"))
    record = reconcile(Extraction(full_name="Elena Ramírez"), existing, NOW)
    assert record.age == 41


def test_merge_without_dob_or_age_keeps_stored_values(existing_patient):
    existing = from_document(existing_patient)
    extraction = to_extraction(
        {"patient_full_name": "Elena Ramirez", "chief_complaint": "Shortness of breath"}
    )
    record = reconcile(extraction, existing, NOW)
    assert record.dob == existing.dob
    assert record.age == existing.age
    assert record.chief_complaint == "Shortness of breath"


def test_merge_keeps_fields_not_extracted(existing_patient):
    existing = from_document(existing_patient)
    extraction = to_extraction(
        {
            "patient_full_name": "Elena Ramirez",
            "gender": "not reported",
            "known_allergies": [],
            "reported_symptoms": ["wheezing"],
        }
    )
    record = reconcile(extraction, existing, NOW)
    assert record.gender == "Female"
    assert record.allergies == ["Penicillin"]
    assert record.reported_symptoms == ["wheezing"]
    assert record.medications == ["Lisinopril 10mg daily"]
    assert record.full_name == "Elena Ramírez"
    assert record.id == "patient-001"


def test_vitals_merge_keeps_blood_pressure(existing_patient):
    existing = from_document(existing_patient)
    extraction = Extraction(full_name="Elena Ramírez", vitals=Vitals(heart_rate=80))
    record = reconcile(extraction, existing, NOW)
    assert record.vitals.blood_pressure == "148/92"
    assert record.vitals.heart_rate == 80


def test_extracted_dob_wins_over_stored(existing_patient):
    existing = from_document(existing_patient)
    record = reconcile(Extraction(full_name="Elena Ramírez", dob="1983-03-10"), existing, NOW)
    assert record.dob == "1983-03-10"
    assert record.age == 41


def test_extracted_age_used_when_no_dob_known(existing_patient):
    stored = {key: value for key, value in existing_patient.items() if key not in {"dob", "age"}}
    existing = from_document(stored)
    record = reconcile(Extraction(full_name="Elena Ramírez", age=42), existing, NOW)
    assert record.dob == "1982-01-01"
    assert record.age == 42


def test_missing_name_raises():
    with pytest.raises(ValidationError):
        reconcile(Extraction(age=42), None, NOW)


def test_existing_record_not_mutated(existing_patient):
    existing = from_document(existing_patient)
    reconcile(Extraction(full_name="Elena Ramírez", vitals=Vitals(heart_rate=70)), existing, NOW)
    assert existing.vitals.heart_rate == 96
