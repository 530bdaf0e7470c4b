from fastapi import APIRouter, Depends

from triage_link.api.dependencies import error_response, get_store
from triage_link.core.matcher import find_document_by_id
from triage_link.core.store import DocumentStore
from triage_link.transforms.outbound import to_summary

router = APIRouter()


@router.get("/patients")
def list_patients(
    id: str | None = None,
    summary: str | None = None,
    store: DocumentStore = Depends(get_store),
):
    """환자 레코드 조회

    Args:
        id: 환자 식별자(지정 시 저장 문서 그대로 단건 조회)
        summary: "1"이면 요약 필드만 반환
        store: 문서 저장소 의존성

    Returns:
        단건 또는 목록 응답
    """
    try:
        if id:
            return {"patient": find_document_by_id(store, id)}
        documents = store.find()
    except Exception as exc:
        return error_response(exc, "patients")
    if summary == "1":
        return {"patients": [to_summary(document) for document in documents]}
    return {"patients": documents}
