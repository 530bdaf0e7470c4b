from __future__ import annotations

import copy

from triage_link.core.store import FieldEquals
from triage_link.utils.parsing import fold_name


class InMemoryDocumentStore:
    """프로세스 내부 딕셔너리 기반 저장소"""

    def __init__(self, documents: list[dict] | None = None) -> None:
        self._documents: dict[str, dict] = {}
        for document in documents or []:
            self.upsert(document)

    def _matches(self, document: dict, predicate: FieldEquals) -> bool:
        value = document.get(predicate.field)
        if predicate.fold and predicate.field == "full_name" and value is None:
            value = document.get("name")
        if not isinstance(value, str):
            return False
        if predicate.fold:
            return fold_name(value) == fold_name(predicate.value)
        return value == predicate.value

    def find(self, predicate: FieldEquals | None = None) -> list[dict]:
        """조건에 맞는 문서 사본을 식별자 순으로 조회"""
        return [
            copy.deepcopy(self._documents[key])
            for key in sorted(self._documents)
            if predicate is None or self._matches(self._documents[key], predicate)
        ]

    def upsert(self, document: dict) -> bool:
        """식별자 기준으로 문서 사본을 저장"""
        document_id = document.get("id")
        if not isinstance(document_id, str) or not document_id:
            return False
        self._documents[document_id] = copy.deepcopy(document)
        return True
