"""Provider 抽象接口。

上层（ChatAgent、对话流程图）不直接依赖具体厂商的 HTTP 接口，而是依赖此协议：

- 每个厂商实现一个 CompletionProvider（如 OpenAIClient）。
- 负责：把消息列表转成具体 API 请求，并从响应 JSON 中取出回复文本。
"""

from typing import Protocol, Sequence

from mcp_chat_core.domain.models import ChatMessage


class CompletionProvider(Protocol):
    """补全接口客户端协议。

    - name: Provider 名称，用于日志。
    - complete(messages): 执行一次非流式补全，返回第一条候选的文本。
    """

    name: str

    async def complete(self, messages: Sequence[ChatMessage]) -> str:
        ...
