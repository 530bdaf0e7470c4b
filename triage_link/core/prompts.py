from __future__ import annotations

import json
from datetime import datetime

from triage_link.models.canonical import PatientRecord
from triage_link.models.client import ChatMessage
from triage_link.transforms.outbound import to_document
from triage_link.utils.parsing import format_timestamp

UPDATE_TOOL_NAME = "update_patient_data"

PROVIDER_SYSTEM_PROMPT = (
    "You are a clinical copilot. Use the active patient record to answer questions "
    "and provide concise, factual guidance. You have permission to update demographics "
    "(DOB, gender, allergies) and vitals only when the provider explicitly states new facts. "
    "If demographic fields are missing, ask for them."
)

UPDATE_PATIENT_TOOL = {
    "type": "function",
    "function": {
        "name": UPDATE_TOOL_NAME,
        "description": (
            "Update the active patient's demographic fields and vitals "
            "when the provider explicitly provides them."
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "date_of_birth": {"type": "string"},
                "gender": {"type": "string"},
                "allergies": {"type": "array", "items": {"type": "string"}},
                "vital_blood_pressure": {"type": "string"},
                "vital_heart_rate": {"type": "number"},
                "vital_temperature": {"type": "number"},
                "vital_oxygen_saturation": {"type": "number"},
            },
            "additionalProperties": False,
        },
    },
}


def extraction_prompt(now: datetime) -> str:
    """추출용 시스템 지시문 생성

    Args:
        now: 기준 시각

    Returns:
        시스템 지시문
    """
    return (
        f"You are a clinical data extractor. Today's date is {format_timestamp(now)}. "
        "Extract and return a JSON object with these keys: "
        "'patient_full_name' (string), 'date_of_birth' (string YYYY-MM-DD), "
        "'age' (integer), 'gender' (string), 'known_allergies' (list of strings), "
        "'chief_complaint' (string), 'history_of_present_illness' (string summary), "
        "'reported_symptoms' (list of strings), "
        "'vitals' (object with blood_pressure string, heart_rate number or string, "
        "temperature number or string, oxygen_saturation number or string), "
        "and 'current_medications' (list of strings). "
        "Logic Rule 1: If the user states their Age but not their Date of Birth, "
        "calculate an approximate Date of Birth (Year = Current Year - Age, Month/Day = 01/01) "
        "and populate the 'date_of_birth' field. "
        "Logic Rule 2: If the user states their Date of Birth but not their Age, "
        "calculate their Age based on today's date and populate the 'age' field. "
        "If date_of_birth, age, gender, or known_allergies are not explicitly stated "
        "or inferred by the rules, set them to null. "
        "Use professional medical phrasing for the HPI and do not infer missing facts."
    )


def render_transcript(messages: list[ChatMessage]) -> str:
    """대화 기록을 "ROLE: 내용" 줄 목록으로 변환(system 발화 제외)

    Args:
        messages: 대화 기록

    Returns:
        대화록 문자열
    """
    return "\n".join(
        f"{message.role.upper()}: {message.content}"
        for message in messages
        if message.role != "system"
    )


def build_extraction_messages(transcript: str, now: datetime) -> list[dict]:
    """추출 요청 메시지 목록"""
    return [
        {"role": "system", "content": extraction_prompt(now)},
        {"role": "user", "content": transcript},
    ]


def missing_demographics(record: PatientRecord) -> list[str]:
    """비어 있는 인적 사항 항목명

    Args:
        record: 환자 레코드

    Returns:
        누락 항목명 목록
    """
    missing = []
    if not record.dob:
        missing.append("DOB")
    if not record.gender:
        missing.append("Gender")
    if not record.allergies:
        missing.append("Allergies")
    return missing


def build_provider_messages(
    record: PatientRecord, messages: list[ChatMessage]
) -> list[dict]:
    """의료진 대화 요청 메시지 목록

    Args:
        record: 활성 환자 레코드
        messages: 의료진 대화 기록

    Returns:
        완성 서비스에 보낼 메시지 목록
    """
    context = [
        {"role": "system", "content": PROVIDER_SYSTEM_PROMPT},
        {
            "role": "system",
            "content": "Active patient record:\n"
            + json.dumps(to_document(record), indent=2, ensure_ascii=False),
        },
    ]
    missing = missing_demographics(record)
    if missing:
        context.append(
            {"role": "system", "content": f"Missing demographics: {', '.join(missing)}."}
        )
    return context + [message.model_dump() for message in messages]
