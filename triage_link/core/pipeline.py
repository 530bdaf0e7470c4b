from __future__ import annotations

from datetime import datetime, timezone

from triage_link.clients.completion_api import CompletionService
from triage_link.core.errors import (
    ExtractionParseError,
    PersistenceError,
    PipelineError,
    ValidationError,
)
from triage_link.core.logger import log_event
from triage_link.core.matcher import find_by_name
from triage_link.core.prompts import build_extraction_messages, render_transcript
from triage_link.core.reconcile import reconcile
from triage_link.core.store import DocumentStore
from triage_link.models.canonical import PatientRecord
from triage_link.models.client import ChatMessage
from triage_link.models.completion import TextReply
from triage_link.transforms.inbound import parse_json_object, to_extraction
from triage_link.transforms.outbound import to_document


def run_intake_pipeline(
    chat_history: list[ChatMessage],
    completion: CompletionService,
    store: DocumentStore,
    now: datetime | None = None,
) -> PatientRecord:
    """문진 대화 기록을 추출, 정규화, 매칭, 병합 후 저장

    Args:
        chat_history: 환자 대화 기록
        completion: 완성 서비스
        store: 문서 저장소
        now: 기준 시각(없으면 현재 UTC)

    Returns:
        저장된 환자 레코드

    Raises:
        ValidationError: 대화 기록 또는 이름이 없을 때
        ExtractionParseError: 추출 응답 파싱 실패 시
        PersistenceError: 저장 실패 시
    """
    transcript = render_transcript(chat_history)
    if not transcript.strip():
        raise ValidationError("chatHistory", "값이 필요함")

    now = now or datetime.now(timezone.utc)
    start = datetime.now(timezone.utc)
    patient_id: str | None = None
    stage = "extract"
    log_event("intake_start", "INFO", None, stage, "문진 추출 시작")
    try:
        reply = completion.complete(
            build_extraction_messages(transcript, now), json_mode=True
        )
        if not isinstance(reply, TextReply):
            raise ExtractionParseError("추출 응답이 JSON 텍스트가 아님")
        raw = parse_json_object(reply.content, "추출")

        stage = "normalize"
        extraction = to_extraction(raw)
        if not extraction.full_name:
            raise ValidationError("patient_full_name", "값이 필요함")

        stage = "match"
        existing = find_by_name(store, extraction.full_name)
        if existing is None:
            log_event("patient_not_matched", "INFO", None, stage, "신규 환자 생성")
        else:
            patient_id = existing.id
            log_event("patient_matched", "INFO", patient_id, stage, "기존 환자 매칭")

        stage = "reconcile"
        record = reconcile(extraction, existing, now)
        patient_id = record.id

        stage = "persist"
        if not store.upsert(to_document(record)):
            raise PersistenceError(record)
    except PipelineError as exc:
        log_event(
            "intake_failed",
            "ERROR",
            patient_id,
            stage,
            exc.message,
            error_code=exc.code,
        )
        raise

    log_event(
        "intake_complete",
        "INFO",
        patient_id,
        stage,
        "문진 저장 완료",
        duration_ms=int((datetime.now(timezone.utc) - start).total_seconds() * 1000),
    )
    return record
