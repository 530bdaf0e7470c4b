import pytest
from fastapi.testclient import TestClient

from conftest import FakeCompletion, RecordingStore
from triage_link.api.dependencies import get_completion, get_store
from triage_link.main import create_app
from triage_link.models.completion import TextReply

CHAT = [{"role": "user", "content": "My name is Marcus Lee and I am 58."}]


class ExplodingCompletion:
    def complete(self, messages, json_mode=False, tools=None):
        raise RuntimeError("upstream payload exploded")


def _make_client(store, completion) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_completion] = lambda: completion
    return TestClient(app)


def test_health():
    client = _make_client(RecordingStore(), FakeCompletion(TextReply()))
    assert client.get("/health").json()["status"] == "정상"


def test_intake_submit_success():
    store = RecordingStore()
    client = _make_client(store, FakeCompletion.json({"patient_full_name": "Marcus Lee", "age": 58}))
    response = client.post("/v1/intake/submit", json={"chatHistory": CHAT})
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["patient"]["full_name"] == "Marcus Lee"
    assert body["patient"]["age"] == 58
    assert "allergies" not in body["patient"]


def test_intake_submit_requires_history():
    store = RecordingStore()
    client = _make_client(store, FakeCompletion.json({}))
    response = client.post("/v1/intake/submit", json={"chatHistory": []})
    assert response.status_code == 400
    assert response.json()["error_code"] == "VALID_001"
    assert store.find_calls == []


def test_intake_submit_parse_error():
    client = _make_client(RecordingStore(), FakeCompletion(TextReply(content="oops")))
    response = client.post("/v1/intake/submit", json={"chatHistory": CHAT})
    assert response.status_code == 502
    assert response.json()["error_code"] == "LLM_PARSE_001"


def test_intake_submit_persistence_error_returns_record():
    store = RecordingStore(fail_upserts=True)
    client = _make_client(store, FakeCompletion.json({"patient_full_name": "Marcus Lee"}))
    response = client.post("/v1/intake/submit", json={"chatHistory": CHAT})
    assert response.status_code == 500
    body = response.json()
    assert body["error_code"] == "STORE_WRITE_001"
    assert body["patient"]["full_name"] == "Marcus Lee"


def test_unexpected_error_is_generic():
    client = _make_client(RecordingStore(), ExplodingCompletion())
    response = client.post("/v1/intake/submit", json={"chatHistory": CHAT})
    assert response.status_code == 500
    assert response.json()["error_code"] == "PIPE_STAGE_001"
    assert "exploded" not in response.text


def test_provider_chat_update(existing_patient):
    store = RecordingStore([existing_patient])
    client = _make_client(store, FakeCompletion.tool({"vital_blood_pressure": "130/85"}))
    response = client.post(
        "/v1/provider/chat",
        json={"patientId": "patient-001", "messages": [{"role": "user", "content": "BP 130/85"}]},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Record updated: BP set to 130/85."
    assert body["patient"]["vitals"]["heart_rate"] == 96


def test_provider_chat_no_update(existing_patient):
    store = RecordingStore([existing_patient])
    client = _make_client(store, FakeCompletion.tool({}))
    response = client.post(
        "/v1/provider/chat",
        json={"patientId": "patient-001", "messages": [{"role": "user", "content": "ok"}]},
    )
    assert response.json() == {"message": "No demographic updates detected."}
    assert store.upsert_calls == []


@pytest.mark.parametrize(
    "payload, status_code",
    [
        ({"messages": [{"role": "user", "content": "hi"}]}, 400),
        ({"patientId": "patient-001", "messages": []}, 400),
        ({"patientId": "missing", "messages": [{"role": "user", "content": "hi"}]}, 404),
    ],
)
def test_provider_chat_errors(existing_patient, payload, status_code):
    client = _make_client(RecordingStore([existing_patient]), FakeCompletion(TextReply(content="hi")))
    response = client.post("/v1/provider/chat", json=payload)
    assert response.status_code == status_code


def test_patients_listing(existing_patient):
    store = RecordingStore([existing_patient, {"id": "patient-002", "full_name": "Marcus Lee", "age": 58}])
    client = _make_client(store, FakeCompletion(TextReply()))
    assert len(client.get("/v1/patients").json()["patients"]) == 2
    summary = client.get("/v1/patients", params={"summary": "1"}).json()["patients"]
    assert summary[0] == {
        "id": "patient-001",
        "full_name": "Elena Ramírez",
        "age": 42,
        "gender": "Female",
        "dob": "1982-03-10",
        "chief_complaint": "Chest tightness",
    }
    single = client.get("/v1/patients", params={"id": "patient-002"}).json()["patient"]
    assert single["full_name"] == "Marcus Lee"
    assert client.get("/v1/patients", params={"id": "nope"}).json() == {"patient": None}


def test_patient_lookup_returns_nameless_document_as_stored():
    stored = {"id": "x", "patientId": "x", "age": 3}
    client = _make_client(RecordingStore([stored]), FakeCompletion(TextReply()))
    response = client.get("/v1/patients", params={"id": "x"})
    assert response.status_code == 200
    assert response.json() == {"patient": stored}


def test_provider_chat_nameless_record_maps_to_error_code():
    client = _make_client(RecordingStore([{"id": "x", "age": 3}]), FakeCompletion(TextReply(content="hi")))
    response = client.post(
        "/v1/provider/chat",
        json={"patientId": "x", "messages": [{"role": "user", "content": "hi"}]},
    )
    assert response.status_code == 500
    assert response.json()["error_code"] == "RECORD_INVALID_001"


def test_summary_keeps_legacy_chief_complaint():
    legacy = {"id": "patient-002", "patientId": "patient-002", "name": "Marcus Lee", "chiefComplaint": "Shortness of breath"}
    client = _make_client(RecordingStore([legacy]), FakeCompletion(TextReply()))
    summary = client.get("/v1/patients", params={"summary": "1"}).json()["patients"]
    assert summary == [legacy]
