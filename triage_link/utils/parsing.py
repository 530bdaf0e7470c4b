from __future__ import annotations

import math
import re
import unicodedata
from datetime import date, datetime, timezone

from dateutil import parser as dateutil_parser

from triage_link.models.canonical import Medication, Vitals

NOT_REPORTED_SENTINEL = "not reported"

ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
NUMBER_PREFIX_PATTERN = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
DOB_PARSE_DEFAULT = datetime(2000, 1, 1)

DOB_FORMATS = [
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%Y.%m.%d",
    "%Y%m%d",
    "%m/%d/%Y",
    "%m-%d-%Y",
    "%d.%m.%Y",
    "%B %d, %Y",
    "%B %d %Y",
    "%b %d, %Y",
    "%b %d %Y",
    "%d %B %Y",
    "%d %b %Y",
]


def normalize_text(value: object) -> str | None:
    """텍스트 값을 정리

    Args:
        value: 원본 값

    Returns:
        정리된 문자열, 비어 있거나 "not reported"이면 None
    """
    if not isinstance(value, str):
        return None
    text = value.strip()
    if text == "":
        return None
    if text.lower() == NOT_REPORTED_SENTINEL:
        return None
    return text


def normalize_list(value: object) -> list[str] | None:
    """문자열 목록을 정리

    Args:
        value: 원본 값

    Returns:
        빈 항목을 제거한 목록, 결과가 비면 None
    """
    if not isinstance(value, list):
        return None
    cleaned = [text for text in (normalize_text(item) for item in value) if text]
    return cleaned or None


def normalize_age(value: object) -> int | None:
    """나이를 0보다 큰 정수로 정규화

    Args:
        value: 원본 값

    Returns:
        내림한 정수 나이 또는 None
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    if value <= 0:
        return None
    return math.floor(value)


def parse_dob(value: object) -> str | None:
    """생년월일을 YYYY-MM-DD 형식으로 파싱

    엄격한 ISO 형식이면 그대로 사용하고, 아니면 허용 포맷 목록을 거쳐
    dateutil 파서로 시도한다. 빠진 월/일은 1월 1일로 채운다.

    Args:
        value: 원본 생년월일 값

    Returns:
        YYYY-MM-DD 문자열 또는 None
    """
    text = normalize_text(value)
    if text is None:
        return None
    if ISO_DATE_PATTERN.match(text):
        try:
            date.fromisoformat(text)
            return text
        except ValueError:
            pass
    for fmt in DOB_FORMATS:
        try:
            return datetime.strptime(text, fmt).strftime("%Y-%m-%d")
        except ValueError:
            continue
    try:
        parsed = dateutil_parser.parse(text, default=DOB_PARSE_DEFAULT)
    except (ValueError, OverflowError):
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.strftime("%Y-%m-%d")


def parse_number(value: object) -> int | float | None:
    """숫자 또는 숫자 형태의 문자열을 파싱

    "98.6 F", "95%"처럼 숫자로 시작하는 문자열은 앞부분만 사용한다.

    Args:
        value: 원본 값

    Returns:
        숫자 값 또는 None
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else None
    if not isinstance(value, str):
        return None
    match = NUMBER_PREFIX_PATTERN.match(value.strip())
    if match is None:
        return None
    parsed = float(match.group(0))
    return parsed if math.isfinite(parsed) else None


def normalize_vitals(value: object) -> Vitals | None:
    """생체신호 객체를 정규화

    Args:
        value: 원본 생체신호 객체

    Returns:
        하나 이상의 항목이 남은 Vitals 또는 None
    """
    if not isinstance(value, dict):
        return None
    vitals = Vitals(
        blood_pressure=normalize_text(value.get("blood_pressure")),
        heart_rate=parse_number(value.get("heart_rate")),
        temperature=parse_number(value.get("temperature")),
        oxygen_saturation=parse_number(value.get("oxygen_saturation")),
    )
    if vitals.is_empty():
        return None
    return vitals


def normalize_medications(value: object) -> list[str | Medication] | None:
    """복용 약물 목록을 정규화

    문자열 항목은 텍스트로, 객체 항목은 이름이 있을 때만 구조화된 약물로 남긴다.

    Args:
        value: 원본 약물 목록

    Returns:
        정리된 약물 목록 또는 None
    """
    if not isinstance(value, list):
        return None
    cleaned: list[str | Medication] = []
    for item in value:
        if isinstance(item, Medication):
            cleaned.append(item)
        elif isinstance(item, dict):
            name = normalize_text(item.get("name"))
            if name:
                cleaned.append(
                    Medication(
                        name=name,
                        dose=normalize_text(item.get("dose")),
                        frequency=normalize_text(item.get("frequency")),
                    )
                )
        else:
            text = normalize_text(item)
            if text:
                cleaned.append(text)
    return cleaned or None


def fold_name(value: str) -> str:
    """대소문자와 악센트를 무시한 비교용 이름 키

    Args:
        value: 이름

    Returns:
        비교용 키
    """
    decomposed = unicodedata.normalize("NFKD", value.strip())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold()


def format_timestamp(value: datetime) -> str:
    """시각을 UTC ISO8601 문자열로 변환

    Args:
        value: 시각(naive이면 UTC로 간주)

    Returns:
        Z로 끝나는 ISO8601 문자열
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
