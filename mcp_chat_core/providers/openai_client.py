"""OpenAI chat completions 适配器（Completion Gateway）。

本模块负责：

1. 在发起任何网络请求之前检查 API Key。
2. 按固定模型与生成参数（max_tokens=1000, temperature=0.7）构造请求体。
3. 调用 HTTP 接口并把网络/HTTP 异常映射到 CompletionError 体系。
4. 取出第一条候选消息的 content。

它是一轮对话的最后一步，没有后续降级，异常直接抛给调用方。
"""

from typing import Any, Dict, Optional, Sequence

import httpx

from mcp_chat_core.config.runtime import ConfigSource
from mcp_chat_core.domain.exceptions import (
    EmptyResponseError,
    InvalidCredentialError,
    MissingCredentialError,
    RateLimitError,
    TransportError,
)
from mcp_chat_core.domain.models import ChatMessage
from mcp_chat_core.infrastructure.logging.logger import logger
from mcp_chat_core.providers.registry import ModelConfig, get_model_config, get_provider_config


class OpenAIClient:
    """OpenAI 补全客户端。

    - config: 提供当前 API Key（每次调用时读取）。
    - model: 逻辑模型名，由 registry 映射为真实模型与生成参数；未登记的名字在构造时抛 KeyError。
    """

    name = "openai"

    def __init__(
        self,
        config: ConfigSource,
        model: str = "chat",
        completion_url: Optional[str] = None,
        timeout: float = 30.0,
    ):
        self._config = config
        self._model_cfg: ModelConfig = get_model_config(self.name, model)
        self._url = completion_url or get_provider_config(self.name).completion_url
        self._timeout = timeout

    async def complete(self, messages: Sequence[ChatMessage]) -> str:
        """执行一次补全调用，返回第一条候选的文本。

        Raises:
            MissingCredentialError: 未配置 API Key（不会发起网络请求）。
            EmptyResponseError: choices 为空或第一条候选不是对象。
            TransportError: HTTP 非 2xx、响应体不是 JSON 或网络错误（401/429 为专门的子类）。
        """

        api_key = self._config.get_api_key()
        if not api_key:
            raise MissingCredentialError()

        payload = self._build_payload(messages)
        logger.info(
            "openai.complete",
            extra={"extra": {"model": payload["model"], "messages": len(payload["messages"])}},
        )
        try:
            async with httpx.AsyncClient(timeout=self._timeout, trust_env=False) as client:
                resp = await client.post(
                    self._url,
                    json=payload,
                    headers={
                        "Content-Type": "application/json",
                        "Accept": "application/json, text/event-stream",
                        "Authorization": f"Bearer {api_key}",
                    },
                )
        except httpx.RequestError as e:
            logger.error("openai.network_error", extra={"extra": {"error": str(e)}})
            raise TransportError(0, type(e).__name__, message=str(e)) from e

        if resp.status_code == 401:
            raise InvalidCredentialError(401, resp.reason_phrase, message="Invalid OpenAI API key")
        if resp.status_code == 429:
            raise RateLimitError(429, resp.reason_phrase, message="OpenAI rate limit exceeded")
        if resp.status_code < 200 or resp.status_code >= 300:
            logger.error(
                "openai.http_error",
                extra={"extra": {"status": resp.status_code, "body": resp.text[:500]}},
            )
            raise TransportError(resp.status_code, resp.reason_phrase)

        try:
            data = resp.json()
        except ValueError as e:
            logger.error(
                "openai.invalid_json",
                extra={"extra": {"status": resp.status_code, "body": resp.text[:500]}},
            )
            raise TransportError(
                resp.status_code, resp.reason_phrase, message=f"Invalid JSON from completion endpoint: {e}"
            ) from e
        return self._parse_response(data)

    def _build_payload(self, messages: Sequence[ChatMessage]) -> Dict[str, Any]:
        return {
            "model": self._model_cfg.provider_model,
            "messages": [m.to_payload() for m in messages],
            "max_tokens": self._model_cfg.max_tokens,
            "temperature": self._model_cfg.default_temperature,
        }

    @staticmethod
    def _parse_response(data: Any) -> str:
        choices = data.get("choices") if isinstance(data, dict) else None
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            raise EmptyResponseError()
        message = choices[0].get("message")
        if not isinstance(message, dict):
            return ""
        content = message.get("content")
        return content if isinstance(content, str) else ""
