from __future__ import annotations

import logging
import sys

from triage_link.core.config import get_settings, load_app_config
from triage_link.core.logging import configure_logging
from triage_link.core.store import DocumentStore, build_store

logger = logging.getLogger("triage-link")

# 이전 문서 형식(patientId, name, chiefComplaint, 약어 생체신호 키)을 그대로 유지
DEMO_PATIENTS = [
    {
        "id": "patient-001",
        "patientId": "patient-001",
        "name": "Elena Ramirez",
        "age": 42,
        "gender": "Female",
        "chiefComplaint": "Intermittent chest tightness and shortness of breath.",
        "history": ["Hypertension", "Seasonal asthma"],
        "medications": ["Lisinopril 10mg daily", "Albuterol inhaler PRN"],
        "vitals": {"bp": "148/92", "hr": 96, "temp": 98.6, "spo2": 95},
        "labs": [
            {"name": "Troponin I", "value": "0.02 ng/mL", "date": "2024-07-01"},
            {"name": "BNP", "value": "110 pg/mL", "date": "2024-07-01"},
        ],
        "notes": "Reports chest tightness during exertion. No radiating pain. Mild wheeze on exam.",
    },
    {
        "id": "patient-002",
        "patientId": "patient-002",
        "name": "Marcus Lee",
        "age": 58,
        "gender": "Male",
        "chiefComplaint": "Dizziness and blurred vision for 2 days.",
        "history": ["Type 2 diabetes", "Hyperlipidemia"],
        "medications": ["Metformin 1000mg BID", "Atorvastatin 20mg nightly"],
        "vitals": {"bp": "132/86", "hr": 78, "temp": 97.9, "spo2": 98},
        "labs": [
            {"name": "A1C", "value": "8.4%", "date": "2024-06-18"},
            {"name": "Glucose", "value": "242 mg/dL", "date": "2024-07-03"},
        ],
        "notes": "Reports missed insulin doses while traveling. Vision improves when hydrated.",
    },
    {
        "id": "patient-003",
        "patientId": "patient-003",
        "name": "Renee Patel",
        "age": 29,
        "gender": "Female",
        "chiefComplaint": "Persistent abdominal pain with nausea.",
        "history": ["IBS", "Anxiety"],
        "medications": ["Sertraline 50mg daily"],
        "vitals": {"bp": "118/74", "hr": 88, "temp": 99.1, "spo2": 99},
        "labs": [
            {"name": "WBC", "value": "11.2 K/uL", "date": "2024-07-02"},
            {"name": "CRP", "value": "18 mg/L", "date": "2024-07-02"},
        ],
        "notes": "Pain localized to lower right quadrant. Nausea increased after meals.",
    },
]


def seed_store(store: DocumentStore, patients: list[dict] | None = None) -> int:
    """데모 환자 문서를 저장소에 업서트

    Args:
        store: 문서 저장소
        patients: 저장할 문서 목록(없으면 데모 환자)

    Returns:
        저장에 성공한 문서 수
    """
    seeded = 0
    for patient in DEMO_PATIENTS if patients is None else patients:
        if store.upsert(patient):
            seeded += 1
        else:
            logger.error("데모 환자 저장 실패: %s", patient.get("id"))
    return seeded


def main() -> int:
    """설정된 저장소에 데모 환자를 채우는 명령행 진입점"""
    configure_logging(get_settings().log_level)
    seeded = seed_store(build_store(load_app_config().store))
    logger.info("데모 환자 %d건 저장", seeded, extra={"event": "seed_complete"})
    return 0 if seeded == len(DEMO_PATIENTS) else 1


if __name__ == "__main__":
    sys.exit(main())
