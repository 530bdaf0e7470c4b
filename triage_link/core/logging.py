import logging

LOG_FORMAT = (
    "%(asctime)s %(levelname)s %(name)s "
    "event=%(event)s patient_id=%(patient_id)s stage=%(stage)s %(message)s"
)

CONTEXT_DEFAULTS = {"event": "system", "patient_id": "-", "stage": "-"}

# 값이 있을 때만 메시지 뒤에 붙는 필드
OPTIONAL_FIELDS = ("error_code", "duration_ms")

# 요청마다 INFO 로그를 남기는 HTTP 클라이언트 로거
QUIET_LOGGERS = ("httpx", "httpcore")


class ContextFormatter(logging.Formatter):
    """파이프라인 문맥 필드를 항상 채워 출력하는 포매터

    event, patient_id, stage가 없거나 None이면 기본값을 쓰고,
    error_code와 duration_ms는 값이 있을 때만 key=value로 덧붙인다.
    """

    def format(self, record: logging.LogRecord) -> str:
        for key, default in CONTEXT_DEFAULTS.items():
            if getattr(record, key, None) is None:
                setattr(record, key, default)
        line = super().format(record)
        extras = [
            f"{key}={getattr(record, key)}"
            for key in OPTIONAL_FIELDS
            if getattr(record, key, None) is not None
        ]
        if extras:
            line = f"{line} {' '.join(extras)}"
        return line


def configure_logging(level: str) -> None:
    """애플리케이션 로깅을 설정

    Args:
        level: 로깅 레벨 문자열
    """
    handler = logging.StreamHandler()
    handler.setFormatter(ContextFormatter(LOG_FORMAT))
    logging.basicConfig(level=level.upper(), handlers=[handler])
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
