from __future__ import annotations

from triage_link.core.errors import ValidationError
from triage_link.core.store import DocumentStore, FieldEquals
from triage_link.models.canonical import PatientRecord
from triage_link.transforms.outbound import from_document

LEGACY_ID_FIELD = "patientId"


def find_by_name(store: DocumentStore, full_name: str | None) -> PatientRecord | None:
    """이름이 같은 기존 환자 레코드를 조회

    대소문자와 악센트를 무시한 완전 일치로 비교하며,
    여러 건이 나오면 식별자 순 첫 번째만 사용한다.

    Args:
        store: 문서 저장소
        full_name: 정규화된 환자 성명

    Returns:
        환자 레코드 또는 None

    Raises:
        ValidationError: 이름이 없을 때
    """
    if not full_name:
        raise ValidationError("patient_full_name", "값이 필요함")
    documents = store.find(FieldEquals("full_name", full_name, fold=True))
    if not documents:
        return None
    return from_document(documents[0])


def find_document_by_id(store: DocumentStore, patient_id: str | None) -> dict | None:
    """식별자로 저장 문서를 그대로 조회

    Args:
        store: 문서 저장소
        patient_id: 환자 식별자(id 또는 patientId)

    Returns:
        저장 문서 또는 None

    Raises:
        ValidationError: 식별자가 없을 때
    """
    if not patient_id or not patient_id.strip():
        raise ValidationError("patientId", "값이 필요함")
    patient_id = patient_id.strip()
    documents = store.find(FieldEquals("id", patient_id))
    if not documents:
        documents = store.find(FieldEquals(LEGACY_ID_FIELD, patient_id))
    if not documents:
        return None
    return documents[0]


def find_by_id(store: DocumentStore, patient_id: str | None) -> PatientRecord | None:
    """식별자로 환자 레코드를 조회

    Args:
        store: 문서 저장소
        patient_id: 환자 식별자(id 또는 patientId)

    Returns:
        환자 레코드 또는 None

    Raises:
        ValidationError: 식별자가 없을 때
        RecordFormatError: 저장 문서를 레코드로 해석할 수 없을 때
    """
    document = find_document_by_id(store, patient_id)
    return from_document(document) if document is not None else None
