from __future__ import annotations

import json
import logging
import threading

import duckdb

from triage_link.core.db import duckdb_cursor, open_duckdb, validate_table_name
from triage_link.core.store import FieldEquals
from triage_link.utils.parsing import fold_name

logger = logging.getLogger("triage-link")


def _name_key(document: dict) -> str | None:
    """문서의 이름 비교 키

    Args:
        document: 환자 문서

    Returns:
        비교용 이름 키 또는 None
    """
    name = document.get("full_name") or document.get("name")
    if not isinstance(name, str) or not name.strip():
        return None
    return fold_name(name)


class DuckDBDocumentStore:
    """환자 문서를 JSON 텍스트로 보관하는 DuckDB 저장소

    연결은 하나만 열고 작업마다 커서를 사용하므로 여러 요청 스레드에서
    같은 인스턴스를 공유할 수 있다. 쓰기는 잠금으로 직렬화한다.
    """

    def __init__(self, path: str, table: str = "patients") -> None:
        self._path = path
        self._table = validate_table_name(table)
        self._write_lock = threading.Lock()
        self._conn = open_duckdb(self._path)
        with duckdb_cursor(self._conn) as cursor:
            cursor.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {self._table} (
                    id VARCHAR,
                    name_key VARCHAR,
                    document VARCHAR
                )
                """
            )

    def close(self) -> None:
        """DuckDB 연결 종료"""
        self._conn.close()

    def find(self, predicate: FieldEquals | None = None) -> list[dict]:
        """조건에 맞는 문서를 조회

        Args:
            predicate: 필드 동등 조건(None이면 전체)

        Returns:
            식별자 순 문서 목록
        """
        query = f"SELECT document FROM {self._table}"
        params: list = []
        if predicate is not None:
            if predicate.field in {"full_name", "name"} and predicate.fold:
                query += " WHERE name_key = ?"
                params.append(fold_name(predicate.value))
            elif predicate.field == "id":
                query += " WHERE id = ?"
                params.append(predicate.value)
            else:
                query += " WHERE json_extract_string(document, ?) = ?"
                params.extend([f"$.{predicate.field}", predicate.value])
        query += " ORDER BY id"
        with duckdb_cursor(self._conn) as cursor:
            rows = cursor.execute(query, params).fetchall()
        return [json.loads(row[0]) for row in rows]

    def upsert(self, document: dict) -> bool:
        """식별자 기준으로 문서를 교체 저장

        Args:
            document: 환자 문서

        Returns:
            성공 여부
        """
        document_id = document.get("id")
        if not isinstance(document_id, str) or not document_id:
            logger.error("식별자 없는 문서 저장 시도")
            return False
        try:
            with self._write_lock, duckdb_cursor(self._conn) as cursor:
                cursor.execute("BEGIN TRANSACTION")
                try:
                    cursor.execute(f"DELETE FROM {self._table} WHERE id = ?", [document_id])
                    cursor.execute(
                        f"INSERT INTO {self._table} (id, name_key, document) VALUES (?, ?, ?)",
                        [document_id, _name_key(document), json.dumps(document, ensure_ascii=False)],
                    )
                except duckdb.Error:
                    cursor.execute("ROLLBACK")
                    raise
                cursor.execute("COMMIT")
        except duckdb.Error:
            logger.exception("문서 저장 실패: %s", document_id)
            return False
        return True
