from __future__ import annotations

import uuid
from datetime import datetime

from triage_link.core.derivation import resolve_dob_and_age
from triage_link.core.errors import ValidationError
from triage_link.models.canonical import NOT_REPORTED, Extraction, PatientRecord, Vitals
from triage_link.utils.parsing import format_timestamp

OVERWRITE_FIELDS = [
    "gender",
    "allergies",
    "chief_complaint",
    "history_of_present_illness",
    "reported_symptoms",
    "medications",
]


def _new_record(full_name: str, record_id: str | None) -> PatientRecord:
    """기본값을 채운 신규 환자 레코드

    Args:
        full_name: 환자 성명
        record_id: 지정 식별자(없으면 생성)

    Returns:
        신규 환자 레코드
    """
    return PatientRecord(
        id=record_id or str(uuid.uuid4()),
        full_name=full_name,
        chief_complaint=NOT_REPORTED,
        history_of_present_illness=NOT_REPORTED,
    )


def reconcile(
    extraction: Extraction,
    existing: PatientRecord | None,
    now: datetime,
    record_id: str | None = None,
) -> PatientRecord:
    """정규화된 추출 결과를 기존 또는 신규 레코드에 병합

    추출 값이 있는 필드만 덮어쓰고, 생체신호는 항목 단위로 병합한다.
    생년월일/나이는 추출 값을 저장 값보다 우선해 맞춘다.

    Args:
        extraction: 정규화된 추출 결과
        existing: 이름으로 매칭된 기존 레코드(없으면 None)
        now: 기준 시각
        record_id: 신규 레코드에 사용할 식별자(선택)

    Returns:
        병합된 환자 레코드

    Raises:
        ValidationError: 추출 결과에 이름이 없을 때
    """
    if not extraction.full_name:
        raise ValidationError("patient_full_name", "값이 필요함")

    if existing is None:
        record = _new_record(extraction.full_name, record_id)
    else:
        record = existing.model_copy(deep=True)

    for field in OVERWRITE_FIELDS:
        value = getattr(extraction, field)
        if value is not None:
            setattr(record, field, value)

    if extraction.vitals is not None:
        record.vitals = (record.vitals or Vitals()).overlay(extraction.vitals)

    dob, age = resolve_dob_and_age(
        extraction.dob or record.dob,
        extraction.age if extraction.age is not None else record.age,
        now,
    )
    if dob:
        record.dob = dob
    if age is not None:
        record.age = age

    record.last_intake_date = format_timestamp(now)
    return record
