from __future__ import annotations

import json
import logging
from typing import Protocol

import httpx

from triage_link.core.config import CompletionConfig, get_settings
from triage_link.models.completion import CompletionReply, TextReply, ToolInvocation

logger = logging.getLogger("triage-link")


class CompletionService(Protocol):
    """생성형 완성 서비스 인터페이스"""

    def complete(
        self,
        messages: list[dict],
        json_mode: bool = False,
        tools: list[dict] | None = None,
    ) -> CompletionReply:
        """메시지 목록으로 완성을 요청"""
        ...


def parse_completion(payload: dict) -> CompletionReply:
    """chat/completions 응답을 태그된 응답 타입으로 변환

    도구 호출이 여러 개면 첫 번째만 사용한다.

    Args:
        payload: 완성 서비스 응답 JSON

    Returns:
        TextReply 또는 ToolInvocation
    """
    choices = payload.get("choices") or [{}]
    message = choices[0].get("message") or {}
    tool_calls = message.get("tool_calls") or []
    if tool_calls:
        function = tool_calls[0].get("function") or {}
        arguments = function.get("arguments") or "{}"
        if isinstance(arguments, dict):
            arguments = json.dumps(arguments)
        return ToolInvocation(name=str(function.get("name", "")), arguments=arguments)
    content = message.get("content")
    return TextReply(content=content if isinstance(content, str) else "")


class CompletionClient:
    """OpenAI 호환 chat/completions 엔드포인트 클라이언트"""

    def __init__(
        self,
        config: CompletionConfig,
        base_url: str | None = None,
        api_key: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        settings = get_settings()
        self._config = config
        self._base_url = (base_url or settings.completion_base_url).rstrip("/")
        self._api_key = api_key if api_key is not None else settings.completion_api_key
        self._transport = transport

    def complete(
        self,
        messages: list[dict],
        json_mode: bool = False,
        tools: list[dict] | None = None,
    ) -> CompletionReply:
        """완성 서비스 호출

        Args:
            messages: role/content 메시지 목록
            json_mode: JSON 객체 응답 요청 여부
            tools: 제공할 도구 정의 목록(선택)

        Returns:
            태그된 완성 응답
        """
        body: dict = {"model": self._config.model, "messages": messages}
        if self._config.temperature is not None:
            body["temperature"] = self._config.temperature
        if json_mode:
            body["response_format"] = {"type": "json_object"}
        if tools:
            body["tools"] = tools
            body["tool_choice"] = "auto"
        headers = {}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        with httpx.Client(
            timeout=self._config.timeout_seconds, transport=self._transport
        ) as client:
            response = client.post(
                f"{self._base_url}/chat/completions", json=body, headers=headers
            )
            response.raise_for_status()
            payload = response.json()
        logger.debug("완성 응답 수신: model=%s", self._config.model)
        return parse_completion(payload if isinstance(payload, dict) else {})
