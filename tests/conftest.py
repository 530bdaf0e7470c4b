from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from triage_link.connectors.memory_store import InMemoryDocumentStore
from triage_link.core.config import get_settings
from triage_link.core.store import FieldEquals
from triage_link.core.telemetry import TelemetryStore
from triage_link.models.completion import TextReply, ToolInvocation

NOW = datetime(2024, 7, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeCompletion:
    """정해진 응답을 돌려주고 요청을 기록하는 완성 서비스"""

    def __init__(self, reply) -> None:
        self.reply = reply
        self.calls: list[dict] = []

    @classmethod
    def json(cls, payload: dict) -> "FakeCompletion":
        return cls(TextReply(content=json.dumps(payload)))

    @classmethod
    def tool(cls, arguments: dict, name: str = "update_patient_data") -> "FakeCompletion":
        return cls(ToolInvocation(name=name, arguments=json.dumps(arguments)))

    def complete(self, messages, json_mode=False, tools=None):
        self.calls.append({"messages": messages, "json_mode": json_mode, "tools": tools})
        return self.reply


class RecordingStore(InMemoryDocumentStore):
    """호출 횟수를 기록하는 메모리 저장소"""

    def __init__(self, documents: list[dict] | None = None, fail_upserts: bool = False) -> None:
        self.find_calls: list[FieldEquals | None] = []
        self.upsert_calls: list[dict] = []
        self.fail_upserts = False
        super().__init__(documents)
        self.upsert_calls = []
        self.fail_upserts = fail_upserts

    def find(self, predicate=None):
        self.find_calls.append(predicate)
        return super().find(predicate)

    def upsert(self, document):
        if self.fail_upserts:
            self.upsert_calls.append(document)
            return False
        result = super().upsert(document)
        self.upsert_calls.append(document)
        return result


@pytest.fixture(autouse=True)
def isolated_telemetry(tmp_path, monkeypatch):
    monkeypatch.setenv("DUCKDB_PATH", str(tmp_path / "telemetry.duckdb"))
    get_settings.cache_clear()
    TelemetryStore._instance = None
    yield
    TelemetryStore._instance = None
    get_settings.cache_clear()


@pytest.fixture
def existing_patient() -> dict:
    return {
        "id": "patient-001",
        "full_name": "Elena Ramírez",
        "dob": "1982-03-10",
        "age": 42,
        "gender": "Female",
        "allergies": ["Penicillin"],
        "chief_complaint": "Chest tightness",
        "history_of_present_illness": "Intermittent chest tightness for one week.",
        "reported_symptoms": ["chest tightness"],
        "vitals": {"blood_pressure": "148/92", "heart_rate": 96},
        "medications": ["Lisinopril 10mg daily"],
        "last_intake_date": "2024-06-01T09:00:00Z",
    }
