from fastapi import APIRouter, Depends

from triage_link.api.dependencies import error_response, get_completion, get_store
from triage_link.clients.completion_api import CompletionService
from triage_link.core.clinician import run_provider_chat
from triage_link.core.store import DocumentStore
from triage_link.models.client import ProviderChatRequest
from triage_link.transforms.outbound import to_document

router = APIRouter()


@router.post("/provider/chat")
def provider_chat(
    payload: ProviderChatRequest,
    store: DocumentStore = Depends(get_store),
    completion: CompletionService = Depends(get_completion),
):
    """의료진 대화를 처리하고 필요 시 환자 레코드를 수정

    Args:
        payload: 의료진 대화 요청
        store: 문서 저장소 의존성
        completion: 완성 서비스 의존성

    Returns:
        응답 메시지(수정 시 환자 레코드 포함) 또는 에러 응답
    """
    try:
        result = run_provider_chat(
            payload.patientId, payload.messages, completion, store
        )
    except Exception as exc:
        return error_response(exc, "provider")
    if result.patient is None:
        return {"message": result.message}
    return {"message": result.message, "patient": to_document(result.patient)}
