from __future__ import annotations

import math
from datetime import date, datetime

from triage_link.utils.parsing import parse_dob


def age_from_dob(dob: str | None, now: datetime) -> int | None:
    """생년월일과 기준 시각으로 만 나이를 계산

    Args:
        dob: 생년월일(YYYY-MM-DD)
        now: 기준 시각

    Returns:
        만 나이, 계산 불가 또는 음수이면 None
    """
    normalized = parse_dob(dob)
    if normalized is None:
        return None
    birth = date.fromisoformat(normalized)
    age = now.year - birth.year
    if (now.month, now.day) < (birth.month, birth.day):
        age -= 1
    return age if age >= 0 else None


def dob_from_age(age: int | float | None, now: datetime) -> str | None:
    """나이로 근사 생년월일(해당 연도 1월 1일)을 생성

    Args:
        age: 나이
        now: 기준 시각

    Returns:
        YYYY-01-01 문자열 또는 None
    """
    if age is None or isinstance(age, bool):
        return None
    if not math.isfinite(age) or age <= 0:
        return None
    year = now.year - math.floor(age)
    if year < 1:
        return None
    return f"{year:04d}-01-01"


def resolve_dob_and_age(
    dob: str | None, age: int | None, now: datetime
) -> tuple[str | None, int | None]:
    """생년월일과 나이를 서로 일관되게 맞춤

    생년월일이 있으면 그것을 기준으로 나이를 다시 계산하고,
    생년월일이 없을 때만 나이로 근사 생년월일을 만든다.

    Args:
        dob: 사용할 생년월일
        age: 사용할 나이
        now: 기준 시각

    Returns:
        (생년월일, 나이)
    """
    if dob:
        calculated = age_from_dob(dob, now)
        if calculated is not None:
            age = calculated
    elif age is not None:
        approx = dob_from_age(age, now)
        if approx:
            dob = approx
    return dob, age
