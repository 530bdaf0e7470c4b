from __future__ import annotations

import math

import pydantic

from triage_link.core.errors import RecordFormatError
from triage_link.models.canonical import PatientRecord, Vitals
from triage_link.utils.parsing import (
    normalize_list,
    normalize_medications,
    normalize_text,
    normalize_vitals,
    parse_dob,
)

VITAL_FIELDS = {"blood_pressure", "heart_rate", "temperature", "oxygen_saturation"}

TEXT_FIELDS = [
    "chief_complaint",
    "history_of_present_illness",
    "last_intake_date",
    "last_updated",
]

SUMMARY_FIELDS = [
    "id",
    "patientId",
    "full_name",
    "name",
    "age",
    "gender",
    "dob",
    "chief_complaint",
    "chiefComplaint",
]


def _stored_age(value: object) -> int | None:
    """저장된 나이 값 해석

    Args:
        value: 저장된 값

    Returns:
        0 이상 정수 나이 또는 None
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value) or value < 0:
        return None
    return math.floor(value)


def _stored_vitals(value: object) -> Vitals | None:
    """저장된 생체신호 해석

    알려진 항목만 정리하고 그 밖의 키는 보존한다.

    Args:
        value: 저장된 생체신호 객체

    Returns:
        Vitals 또는 None
    """
    if not isinstance(value, dict):
        return None
    data = {key: item for key, item in value.items() if key not in VITAL_FIELDS}
    normalized = normalize_vitals(value)
    if normalized is not None:
        data.update(normalized.model_dump(exclude_none=True))
    if not data:
        return None
    return Vitals(**data)


def from_document(document: dict) -> PatientRecord:
    """저장소 문서를 캐노니컬 레코드로 변환

    알 수 없는 필드는 그대로 보존하고 알려진 필드만 정리한다.

    Args:
        document: 저장소 문서

    Returns:
        캐노니컬 환자 레코드

    Raises:
        RecordFormatError: 식별자나 이름이 없어 레코드가 될 수 없을 때
    """
    data = dict(document)
    record_id = data.get("id") or data.get("patientId")
    data["id"] = str(record_id) if record_id is not None else ""
    data["full_name"] = normalize_text(data.get("full_name")) or normalize_text(
        data.get("name")
    )
    data["dob"] = parse_dob(data.get("dob"))
    data["age"] = _stored_age(data.get("age"))
    data["gender"] = normalize_text(data.get("gender"))
    for key in TEXT_FIELDS:
        if not isinstance(data.get(key), str):
            data[key] = None
    data["allergies"] = normalize_list(data.get("allergies"))
    data["reported_symptoms"] = normalize_list(data.get("reported_symptoms"))
    data["medications"] = normalize_medications(data.get("medications"))
    data["vitals"] = _stored_vitals(data.get("vitals"))
    try:
        return PatientRecord.model_validate(data)
    except pydantic.ValidationError as exc:
        fields = sorted({str(error["loc"][0]) for error in exc.errors() if error["loc"]})
        raise RecordFormatError(data["id"] or "-", ", ".join(fields) or "검증 실패") from exc


def to_document(record: PatientRecord) -> dict:
    """캐노니컬 레코드를 저장소 문서로 변환

    값이 없는 필드는 문서에서 생략한다.

    Args:
        record: 캐노니컬 환자 레코드

    Returns:
        저장소 문서 딕셔너리
    """
    return record.model_dump(exclude_none=True)


def to_summary(document: dict) -> dict:
    """목록 화면용 요약 문서

    Args:
        document: 저장소 문서

    Returns:
        요약 필드만 남긴 딕셔너리
    """
    return {key: document[key] for key in SUMMARY_FIELDS if key in document}
