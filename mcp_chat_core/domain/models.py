"""统一的对话与会话数据模型。

- ChatMessage: 一条对话消息（system/user/assistant）。
- SessionState: MCP 会话健康状态（仅由 SessionManager 写入）。
- HealthReport: /health 探测结果。
- Enrichment: 一次上下文增强的结果（使用了哪一层降级策略、失败原因）。

补全接口与 MCP 客户端都只依赖这些模型，不直接依赖 UI 层的数据结构。
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, List, Literal, Optional


# 与 OpenAI chat completions 的 role 字段对应
Role = Literal["system", "user", "assistant"]

EnrichmentTier = Literal["rich", "degraded", "minimal"]


@dataclass
class ChatMessage:
    """一条对话消息。"""

    role: Role
    content: str

    def to_payload(self) -> Dict[str, str]:
        return asdict(self)


Conversation = List[ChatMessage]


class SessionState(str, Enum):
    """MCP 会话状态机：UNKNOWN → CHECKING → HEALTHY | UNAVAILABLE。

    CHECKING 只在 initialize / 健康探测进行中短暂出现；
    HEALTHY 与 UNAVAILABLE 可以互相切换，没有终态。
    """

    UNKNOWN = "unknown"
    CHECKING = "checking"
    HEALTHY = "healthy"
    UNAVAILABLE = "unavailable"

    @property
    def label(self) -> str:
        return _STATE_LABELS[self]


_STATE_LABELS = {
    SessionState.UNKNOWN: "Unknown",
    SessionState.CHECKING: "Checking...",
    SessionState.HEALTHY: "Healthy",
    SessionState.UNAVAILABLE: "Unavailable",
}


@dataclass
class HealthReport:
    """健康检查结果。

    - status: "healthy" 或 "unhealthy"。
    - timestamp: 探测完成时间（ISO-8601, UTC）。
    - data: 服务端原始响应 JSON。
    """

    status: Literal["healthy", "unhealthy"]
    timestamp: str
    data: Any = None
    server_type: str = "real"

    @property
    def healthy(self) -> bool:
        return self.status == "healthy"


@dataclass
class Enrichment:
    """ContextComposer 的输出。

    messages 中最多只有一条 system 消息，且一定位于开头。
    failure_reason 记录富数据层失败的原因，只用于日志/调试，不展示给最终用户。
    """

    messages: Conversation
    tier: EnrichmentTier
    failure_reason: Optional[str] = None
