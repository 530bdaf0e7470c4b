from __future__ import annotations

import re
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import duckdb

_TABLE_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def validate_table_name(table: str) -> str:
    """테이블 이름 검증

    Args:
        table: 테이블 이름

    Returns:
        검증된 테이블 이름

    Raises:
        ValueError: 식별자로 쓸 수 없는 이름일 때
    """
    if not _TABLE_NAME_PATTERN.match(table):
        raise ValueError(f"테이블 이름 오류: {table}")
    return table


def open_duckdb(path: str) -> duckdb.DuckDBPyConnection:
    """DuckDB 연결 생성

    프로세스 안에서는 이 연결 하나를 공유하고, 작업마다
    duckdb_cursor로 스레드 전용 커서를 연다.

    Args:
        path: DB 파일 경로(":memory:" 허용)

    Returns:
        DuckDB 연결
    """
    if path != ":memory:":
        Path(path).parent.mkdir(parents=True, exist_ok=True)
    return duckdb.connect(path)


@contextmanager
def duckdb_cursor(conn: duckdb.DuckDBPyConnection) -> Iterator[duckdb.DuckDBPyConnection]:
    """공유 연결에서 작업 단위 커서 생성

    Args:
        conn: 공유 DuckDB 연결

    Returns:
        작업이 끝나면 닫히는 커서
    """
    cursor = conn.cursor()
    try:
        yield cursor
    finally:
        cursor.close()
