from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class TextReply(BaseModel):
    """완성 서비스의 자유 텍스트 응답"""

    kind: Literal["text"] = "text"
    content: str = ""


class ToolInvocation(BaseModel):
    """완성 서비스의 도구 호출 응답

    arguments는 서비스가 보낸 JSON 문자열 그대로이며 파싱은 호출 측에서 한다.
    """

    kind: Literal["tool_call"] = "tool_call"
    name: str
    arguments: str = "{}"


CompletionReply = Annotated[Union[TextReply, ToolInvocation], Field(discriminator="kind")]
