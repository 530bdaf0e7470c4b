from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from triage_link.core.config import StoreConfig


@dataclass(frozen=True)
class FieldEquals:
    """문서 필드 동등 비교 조건

    fold가 참이면 대소문자와 악센트를 무시하고 비교한다.
    """

    field: str
    value: str
    fold: bool = False


class DocumentStore(Protocol):
    """환자 문서 저장소 인터페이스"""

    def find(self, predicate: FieldEquals | None = None) -> list[dict]:
        """조건에 맞는 문서를 식별자 순으로 조회(None이면 전체)"""
        ...

    def upsert(self, document: dict) -> bool:
        """식별자 기준으로 문서를 업서트하고 성공 여부를 반환"""
        ...


def build_store(config: StoreConfig) -> DocumentStore:
    """설정에 맞는 저장소 인스턴스를 생성

    Args:
        config: 저장소 설정

    Returns:
        문서 저장소
    """
    if config.type == "memory":
        from triage_link.connectors.memory_store import InMemoryDocumentStore

        return InMemoryDocumentStore()
    from triage_link.connectors.duckdb_store import DuckDBDocumentStore

    return DuckDBDocumentStore(config.path, config.table)
