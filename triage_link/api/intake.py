from fastapi import APIRouter, Depends

from triage_link.api.dependencies import error_response, get_completion, get_store
from triage_link.clients.completion_api import CompletionService
from triage_link.core.pipeline import run_intake_pipeline
from triage_link.core.store import DocumentStore
from triage_link.models.client import IntakeRequest
from triage_link.transforms.outbound import to_document

router = APIRouter()


@router.post("/intake/submit")
def submit_intake(
    payload: IntakeRequest,
    store: DocumentStore = Depends(get_store),
    completion: CompletionService = Depends(get_completion),
):
    """환자 문진 대화를 제출

    Args:
        payload: 문진 제출 요청
        store: 문서 저장소 의존성
        completion: 완성 서비스 의존성

    Returns:
        병합된 환자 레코드 또는 에러 응답
    """
    try:
        record = run_intake_pipeline(payload.chatHistory, completion, store)
    except Exception as exc:
        return error_response(exc, "intake")
    return {"success": True, "patient": to_document(record)}
