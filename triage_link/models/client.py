from typing import Literal

from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    """대화 기록의 한 발화"""

    role: Literal["user", "assistant", "system"] = Field(..., description="화자 역할")
    content: str = Field(default="", description="발화 내용")


class IntakeRequest(BaseModel):
    """문진 제출 요청"""

    chatHistory: list[ChatMessage] = Field(default_factory=list, description="대화 기록")


class ProviderChatRequest(BaseModel):
    """의료진 대화 요청"""

    patientId: str | None = Field(default=None, description="환자 식별자")
    messages: list[ChatMessage] = Field(default_factory=list, description="대화 기록")
