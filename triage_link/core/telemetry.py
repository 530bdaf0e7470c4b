from __future__ import annotations

import threading

from triage_link.core.config import get_settings
from triage_link.core.db import duckdb_cursor, open_duckdb


class TelemetryStore:
    """파이프라인 로그를 저장하는 DuckDB 텔레메트리 저장소

    인스턴스는 프로세스에 하나이며 초기화가 끝난 뒤에만 공개된다.
    각 요청 스레드는 공유 연결에서 자기 커서로 기록한다.
    """

    _instance: "TelemetryStore | None" = None
    _lock = threading.Lock()

    def __new__(cls) -> "TelemetryStore":
        instance = cls._instance
        if instance is None:
            with cls._lock:
                if cls._instance is None:
                    created = super().__new__(cls)
                    created._init_db()
                    cls._instance = created
                instance = cls._instance
        return instance

    def _init_db(self) -> None:
        self._conn = open_duckdb(get_settings().duckdb_path)
        with duckdb_cursor(self._conn) as cursor:
            cursor.execute(
                """
                CREATE TABLE IF NOT EXISTS logs (
                    timestamp TIMESTAMP,
                    level VARCHAR,
                    event VARCHAR,
                    patient_id VARCHAR,
                    stage VARCHAR,
                    error_code VARCHAR,
                    message VARCHAR,
                    duration_ms INTEGER
                )
                """
            )

    def insert_log(self, record: dict) -> None:
        """로그 레코드를 저장

        Args:
            record: 로그 레코드 딕셔너리
        """
        with duckdb_cursor(self._conn) as cursor:
            cursor.execute(
                """
                INSERT INTO logs (timestamp, level, event, patient_id, stage, error_code, message, duration_ms)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    record.get("timestamp"),
                    record.get("level"),
                    record.get("event"),
                    record.get("patient_id"),
                    record.get("stage"),
                    record.get("error_code"),
                    record.get("message"),
                    record.get("duration_ms"),
                ],
            )

    def query_logs(self, where: str, params: list) -> list[tuple]:
        """조건절(WHERE)을 사용해 로그를 조회

        Args:
            where: SQL WHERE 절
            params: 파라미터 목록

        Returns:
            행 목록
        """
        query = "SELECT * FROM logs"
        if where:
            query += f" WHERE {where}"
        with duckdb_cursor(self._conn) as cursor:
            return cursor.execute(query, params).fetchall()
