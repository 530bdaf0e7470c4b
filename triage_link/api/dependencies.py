from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import status
from fastapi.responses import JSONResponse

from triage_link.clients.completion_api import CompletionClient, CompletionService
from triage_link.core.config import load_app_config
from triage_link.core.errors import PersistenceError, PipelineError
from triage_link.core.store import DocumentStore, build_store
from triage_link.transforms.outbound import to_document

INTERNAL_ERROR_CODE = "PIPE_STAGE_001"


@lru_cache
def get_store() -> DocumentStore:
    """설정에 맞는 문서 저장소를 반환"""
    return build_store(load_app_config().store)


def get_completion() -> CompletionService:
    """설정에 맞는 완성 서비스 클라이언트를 반환"""
    return CompletionClient(load_app_config().completion)


def error_response(exc: Exception, stage: str) -> JSONResponse:
    """예외를 호출자용 JSON 응답으로 변환

    파이프라인 예외가 아니면 원본 내용을 감추고 일반 오류로 응답한다.

    Args:
        exc: 발생한 예외
        stage: 로그에 남길 단계

    Returns:
        JSON 에러 응답
    """
    if isinstance(exc, PipelineError):
        content = {"error": exc.message, "error_code": exc.code}
        if isinstance(exc, PersistenceError):
            content["patient"] = to_document(exc.record)
        return JSONResponse(status_code=exc.status_code, content=content)
    logging.getLogger("triage-link").exception(
        "처리 중 예기치 않은 오류", extra={"event": "unexpected_error", "stage": stage}
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "내부 처리 오류", "error_code": INTERNAL_ERROR_CODE},
    )
