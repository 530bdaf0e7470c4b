from concurrent.futures import ThreadPoolExecutor

from conftest import NOW, FakeCompletion
from triage_link.connectors.duckdb_store import DuckDBDocumentStore
from triage_link.core.logger import log_event
from triage_link.core.pipeline import run_intake_pipeline
from triage_link.core.store import FieldEquals
from triage_link.core.telemetry import TelemetryStore
from triage_link.models.client import ChatMessage

WORKERS = 8
PER_WORKER = 5


def _submit(store, worker: int) -> list[str]:
    ids = []
    for index in range(PER_WORKER):
        name = f"Patient {worker}-{index}"
        chat = [ChatMessage(role="user", content=f"My name is {name}")]
        completion = FakeCompletion.json({"patient_full_name": name, "age": 40})
        ids.append(run_intake_pipeline(chat, completion, store, now=NOW).id)
    return ids


def test_parallel_intakes_share_one_duckdb_store(tmp_path):
    store = DuckDBDocumentStore(str(tmp_path / "patients.duckdb"))
    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        results = list(pool.map(lambda worker: _submit(store, worker), range(WORKERS)))

    ids = [record_id for batch in results for record_id in batch]
    documents = store.find()
    assert len(ids) == WORKERS * PER_WORKER
    assert sorted(doc["id"] for doc in documents) == sorted(ids)
    assert len(store.find(FieldEquals("full_name", "patient 3-4", fold=True))) == 1
    rows = TelemetryStore().query_logs("event = ?", ["intake_complete"])
    assert len(rows) == WORKERS * PER_WORKER


def test_parallel_upserts_of_same_document(tmp_path, existing_patient):
    store = DuckDBDocumentStore(str(tmp_path / "patients.duckdb"))

    def write(index: int) -> bool:
        return store.upsert(dict(existing_patient, gender=f"G{index}"))

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        outcomes = list(pool.map(write, range(WORKERS * 4)))

    assert all(outcomes)
    assert len(store.find()) == 1


def test_telemetry_first_use_from_many_threads():
    def first_log(index: int) -> int:
        log_event("intake_start", "INFO", f"patient-{index}", "extract", "문진 추출 시작")
        return id(TelemetryStore())

    with ThreadPoolExecutor(max_workers=WORKERS * 2) as pool:
        instances = set(pool.map(first_log, range(WORKERS * 4)))

    assert len(instances) == 1
    rows = TelemetryStore().query_logs("event = ?", ["intake_start"])
    assert len(rows) == WORKERS * 4
