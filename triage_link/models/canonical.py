from pydantic import BaseModel, ConfigDict, Field

NOT_REPORTED = "Not reported"


class Vitals(BaseModel):
    """생체신호 측정값(각 항목 독립적으로 선택)"""

    model_config = ConfigDict(extra="allow")

    blood_pressure: str | None = Field(default=None, description="혈압(자유 텍스트)")
    heart_rate: int | float | None = Field(default=None, description="맥박수")
    temperature: int | float | None = Field(default=None, description="체온")
    oxygen_saturation: int | float | None = Field(
        default=None, description="산소포화도"
    )

    def is_empty(self) -> bool:
        """값이 하나도 없는지 확인"""
        return not self.model_dump(exclude_none=True)

    def overlay(self, update: "Vitals | None") -> "Vitals":
        """항목 단위로 새 값을 덮어쓴 생체신호를 반환

        Args:
            update: 새로 전달된 생체신호

        Returns:
            병합된 생체신호
        """
        if update is None:
            return self.model_copy()
        merged = self.model_dump(exclude_none=True)
        merged.update(update.model_dump(exclude_none=True))
        return Vitals(**merged)


class Medication(BaseModel):
    """구조화된 복용 약물"""

    name: str = Field(..., min_length=1, description="약물명")
    dose: str | None = Field(default=None, description="용량")
    frequency: str | None = Field(default=None, description="복용 빈도")


class Extraction(BaseModel):
    """대화 기록에서 추출하고 정규화한 결과(None은 값 없음)"""

    full_name: str | None = None
    dob: str | None = None
    age: int | None = Field(default=None, ge=0)
    gender: str | None = None
    allergies: list[str] | None = None
    chief_complaint: str | None = None
    history_of_present_illness: str | None = None
    reported_symptoms: list[str] | None = None
    vitals: Vitals | None = None
    medications: list[str | Medication] | None = None


class ClinicianUpdate(BaseModel):
    """의료진 도구 호출로 허용되는 부분 업데이트"""

    dob: str | None = None
    gender: str | None = None
    allergies: list[str] | None = None
    vitals: Vitals | None = None

    def scalar_updates(self) -> dict:
        """생체신호를 제외한 업데이트 항목"""
        return self.model_dump(exclude_none=True, exclude={"vitals"})

    def is_empty(self) -> bool:
        """반영할 값이 하나도 없는지 확인"""
        return not self.scalar_updates() and (self.vitals is None or self.vitals.is_empty())


class PatientRecord(BaseModel):
    """저장소에 보관되는 캐노니컬 환자 레코드"""

    model_config = ConfigDict(extra="allow")

    id: str = Field(..., min_length=1, description="환자 식별자")
    full_name: str = Field(..., min_length=1, description="환자 성명")
    dob: str | None = Field(default=None, description="생년월일(YYYY-MM-DD)")
    age: int | None = Field(default=None, ge=0, description="나이")
    gender: str | None = Field(default=None, description="성별")
    allergies: list[str] | None = Field(default=None, description="알레르기")
    chief_complaint: str | None = Field(default=None, description="주호소")
    history_of_present_illness: str | None = Field(
        default=None, description="현병력"
    )
    reported_symptoms: list[str] | None = Field(default=None, description="증상")
    vitals: Vitals | None = Field(default=None, description="생체신호")
    medications: list[str | Medication] | None = Field(
        default=None, description="복용 약물"
    )
    last_intake_date: str | None = Field(
        default=None, description="마지막 문진 시각(UTC ISO8601)"
    )
    last_updated: str | None = Field(
        default=None, description="마지막 의료진 수정 시각(UTC ISO8601)"
    )
