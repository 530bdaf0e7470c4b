from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from triage_link.models.canonical import PatientRecord


class PipelineError(Exception):
    """파이프라인 예외의 기본 클래스"""

    status_code = 500

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


class ValidationError(PipelineError):
    """필수 값(이름, 식별자, 대화 기록) 누락 시 발생"""

    status_code = 400

    def __init__(self, field: str, message: str) -> None:
        super().__init__("VALID_001", f"{field}: {message}")
        self.field = field


class ExtractionParseError(PipelineError):
    """완성 서비스 응답을 요청한 구조로 파싱하지 못한 경우 발생"""

    status_code = 502

    def __init__(self, message: str) -> None:
        super().__init__("LLM_PARSE_001", message)


class NotFoundError(PipelineError):
    """식별자에 해당하는 환자 레코드가 없을 때 발생"""

    status_code = 404

    def __init__(self, patient_id: str) -> None:
        super().__init__("PATIENT_NOT_FOUND", f"환자 레코드 없음: {patient_id}")
        self.patient_id = patient_id


class PersistenceError(PipelineError):
    """저장소 업서트 실패 시 발생

    병합된 레코드는 버리지 않고 예외에 담아 호출자에게 전달한다.
    """

    def __init__(self, record: PatientRecord, message: str = "환자 레코드 저장 실패") -> None:
        super().__init__("STORE_WRITE_001", message)
        self.record = record


class RecordFormatError(PipelineError):
    """저장된 문서를 환자 레코드로 해석할 수 없을 때 발생"""

    def __init__(self, document_id: str, message: str) -> None:
        super().__init__("RECORD_INVALID_001", f"저장 문서 형식 오류({document_id}): {message}")
        self.document_id = document_id
