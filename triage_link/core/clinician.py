from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from triage_link.clients.completion_api import CompletionService
from triage_link.core.errors import NotFoundError, PersistenceError, PipelineError, ValidationError
from triage_link.core.logger import log_event
from triage_link.core.matcher import find_by_id
from triage_link.core.prompts import (
    UPDATE_PATIENT_TOOL,
    UPDATE_TOOL_NAME,
    build_provider_messages,
)
from triage_link.core.store import DocumentStore
from triage_link.models.canonical import ClinicianUpdate, PatientRecord, Vitals
from triage_link.models.client import ChatMessage
from triage_link.models.completion import TextReply, ToolInvocation
from triage_link.transforms.inbound import parse_json_object, to_clinician_update
from triage_link.transforms.outbound import to_document
from triage_link.utils.parsing import format_timestamp

NO_UPDATE_MESSAGE = "No demographic updates detected."
FALLBACK_REPLY = "I could not generate a response."

VITAL_LABELS = [
    ("blood_pressure", "BP"),
    ("heart_rate", "HR"),
    ("temperature", "Temp"),
    ("oxygen_saturation", "SpO2"),
]


@dataclass
class ClinicianChatResult:
    """의료진 대화 처리 결과(수정이 없으면 patient는 None)"""

    message: str
    patient: PatientRecord | None = None


def _format_value(value: object) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def merge_clinician_update(
    record: PatientRecord, update: ClinicianUpdate, now: datetime
) -> PatientRecord | None:
    """허용된 부분 업데이트를 레코드에 반영

    전달된 항목만 반영하며 다른 값을 추론하지 않는다.

    Args:
        record: 기존 환자 레코드
        update: 정규화된 부분 업데이트
        now: 기준 시각

    Returns:
        수정된 레코드, 반영할 값이 없으면 None
    """
    if update.is_empty():
        return None
    merged = record.model_copy(deep=True)
    for field, value in update.scalar_updates().items():
        setattr(merged, field, value)
    if update.vitals is not None and not update.vitals.is_empty():
        merged.vitals = (merged.vitals or Vitals()).overlay(update.vitals)
    merged.last_updated = format_timestamp(now)
    return merged


def summarize_update(update: ClinicianUpdate) -> str:
    """변경된 항목을 나열한 확인 문장

    Args:
        update: 반영된 부분 업데이트

    Returns:
        "Record updated: ..." 형식 문장
    """
    parts = []
    if update.dob:
        parts.append(f"DOB set to {update.dob}")
    if update.gender:
        parts.append(f"gender set to {update.gender}")
    if update.allergies:
        parts.append(f"allergies set to {', '.join(update.allergies)}")
    if update.vitals is not None:
        for field, label in VITAL_LABELS:
            value = getattr(update.vitals, field)
            if value is not None:
                parts.append(f"{label} set to {_format_value(value)}")
    return f"Record updated: {'; '.join(parts)}."


def apply_tool_invocation(
    store: DocumentStore,
    record: PatientRecord,
    invocation: ToolInvocation,
    now: datetime,
) -> ClinicianChatResult:
    """update_patient_data 도구 호출을 적용하고 저장

    Args:
        store: 문서 저장소
        record: 활성 환자 레코드
        invocation: 도구 호출
        now: 기준 시각

    Returns:
        처리 결과

    Raises:
        ExtractionParseError: 도구 인자가 JSON 객체가 아닐 때
        PersistenceError: 저장 실패 시
    """
    update = to_clinician_update(parse_json_object(invocation.arguments, "도구 인자"))
    merged = merge_clinician_update(record, update, now)
    if merged is None:
        log_event("no_update", "INFO", record.id, "tool_call", "반영할 수정 사항 없음")
        return ClinicianChatResult(message=NO_UPDATE_MESSAGE)
    if not store.upsert(to_document(merged)):
        raise PersistenceError(merged)
    log_event("record_updated", "INFO", record.id, "persist", "의료진 수정 반영")
    return ClinicianChatResult(message=summarize_update(update), patient=merged)


def run_provider_chat(
    patient_id: str | None,
    messages: list[ChatMessage],
    completion: CompletionService,
    store: DocumentStore,
    now: datetime | None = None,
) -> ClinicianChatResult:
    """의료진 대화 한 건을 처리

    Args:
        patient_id: 환자 식별자
        messages: 의료진 대화 기록
        completion: 완성 서비스
        store: 문서 저장소
        now: 기준 시각(없으면 현재 UTC)

    Returns:
        처리 결과

    Raises:
        ValidationError: 식별자 또는 대화 기록이 없을 때
        NotFoundError: 환자 레코드가 없을 때
        RecordFormatError: 저장 문서를 레코드로 해석할 수 없을 때
    """
    if not messages:
        raise ValidationError("messages", "값이 필요함")
    now = now or datetime.now(timezone.utc)
    try:
        record = find_by_id(store, patient_id)
        if record is None:
            raise NotFoundError(str(patient_id))
        reply = completion.complete(
            build_provider_messages(record, messages), tools=[UPDATE_PATIENT_TOOL]
        )
        if isinstance(reply, ToolInvocation) and reply.name == UPDATE_TOOL_NAME:
            log_event("tool_call", "INFO", record.id, "tool_call", "수정 도구 호출 수신")
            return apply_tool_invocation(store, record, reply, now)
        content = reply.content.strip() if isinstance(reply, TextReply) else ""
        return ClinicianChatResult(message=content or FALLBACK_REPLY)
    except PipelineError as exc:
        log_event(
            "provider_chat_failed",
            "ERROR",
            patient_id,
            "tool_call",
            exc.message,
            error_code=exc.code,
        )
        raise
