from __future__ import annotations

import json

from triage_link.core.errors import ExtractionParseError
from triage_link.models.canonical import ClinicianUpdate, Extraction
from triage_link.utils.parsing import (
    normalize_age,
    normalize_list,
    normalize_medications,
    normalize_text,
    normalize_vitals,
    parse_dob,
)


def parse_json_object(raw: str | None, what: str) -> dict:
    """완성 서비스가 돌려준 JSON 객체 문자열을 파싱

    Args:
        raw: JSON 문자열
        what: 에러 메시지에 사용할 대상 이름

    Returns:
        파싱된 딕셔너리

    Raises:
        ExtractionParseError: JSON 객체가 아닐 때
    """
    try:
        data = json.loads(raw or "{}")
    except (TypeError, ValueError) as exc:
        raise ExtractionParseError(f"{what} JSON 파싱 실패") from exc
    if not isinstance(data, dict):
        raise ExtractionParseError(f"{what} JSON이 객체가 아님")
    return data


def to_extraction(raw: dict) -> Extraction:
    """추출 원본 객체를 정규화된 추출 모델로 변환

    Args:
        raw: 완성 서비스가 만든 추출 객체

    Returns:
        정규화된 추출 결과
    """
    return Extraction(
        full_name=normalize_text(raw.get("patient_full_name")),
        dob=parse_dob(raw.get("date_of_birth")),
        age=normalize_age(raw.get("age")),
        gender=normalize_text(raw.get("gender")),
        allergies=normalize_list(raw.get("known_allergies")),
        chief_complaint=normalize_text(raw.get("chief_complaint")),
        history_of_present_illness=normalize_text(
            raw.get("history_of_present_illness")
        ),
        reported_symptoms=normalize_list(raw.get("reported_symptoms")),
        vitals=normalize_vitals(raw.get("vitals")),
        medications=normalize_medications(raw.get("current_medications")),
    )


def to_clinician_update(arguments: dict) -> ClinicianUpdate:
    """도구 호출 인자를 허용된 부분 업데이트로 변환

    허용 목록 밖의 인자는 무시한다.

    Args:
        arguments: update_patient_data 도구 인자

    Returns:
        정규화된 부분 업데이트
    """
    vitals = normalize_vitals(
        {
            "blood_pressure": arguments.get("vital_blood_pressure"),
            "heart_rate": arguments.get("vital_heart_rate"),
            "temperature": arguments.get("vital_temperature"),
            "oxygen_saturation": arguments.get("vital_oxygen_saturation"),
        }
    )
    return ClinicianUpdate(
        dob=parse_dob(arguments.get("date_of_birth")),
        gender=normalize_text(arguments.get("gender")),
        allergies=normalize_list(arguments.get("allergies")),
        vitals=vitals,
    )
