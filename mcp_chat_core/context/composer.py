"""上下文增强（三层降级）。

每轮对话发送给补全接口前，ContextComposer 会尝试为对话注入一条 system 消息：

1. rich: 通过 SessionManager 调用 getCompanies，把公司数据渲染进 system 消息。
2. degraded: rich 失败但调用方提供了非空工具列表时，只列出工具名与说明。
3. minimal: 以上都不可用，不注入 system 消息。

任何一层都会先去掉输入中已有的 system 消息，输出中最多只有一条 system 消息且位于开头。
enrich() 永远不会抛异常。
"""

from typing import Any, Iterable, List, Optional, Protocol

from mcp_chat_core.context.normalize import normalize_companies
from mcp_chat_core.context.render import render_company_context
from mcp_chat_core.domain.models import ChatMessage, Conversation, Enrichment
from mcp_chat_core.infrastructure.logging.logger import logger
from mcp_chat_core.prompts import render_system_prompt
from mcp_chat_core.tools.definitions import ToolDescriptor, parse_tool_descriptors

NO_DESCRIPTION = "No description available"


class ToolCaller(Protocol):
    async def call_tool(self, name: str, arguments: Optional[dict] = None) -> Any:
        ...


def strip_system_messages(conversation: Iterable[Any]) -> Conversation:
    """去掉 system 消息，保持其余消息的相对顺序。"""

    messages: Conversation = []
    for m in conversation or []:
        if isinstance(m, dict):
            m = ChatMessage(role=m.get("role", "user"), content=str(m.get("content") or ""))
        elif not isinstance(m, ChatMessage):
            continue
        if m.role == "system":
            continue
        messages.append(m)
    return messages


def describe_tools(tools: Iterable[ToolDescriptor]) -> str:
    return "\n".join(f"- {t.name}: {t.description or NO_DESCRIPTION}" for t in tools)


class ContextComposer:
    def __init__(self, session: ToolCaller, companies_tool: str = "getCompanies", locale: str = "en"):
        self._session = session
        self._companies_tool = companies_tool
        self._locale = locale

    async def enrich(self, conversation: Iterable[Any], tools: Any = None) -> Conversation:
        """返回增强后的消息列表（见模块说明）。"""

        return (await self.compose(conversation, tools)).messages

    async def compose(self, conversation: Iterable[Any], tools: Any = None) -> Enrichment:
        """与 enrich 相同，但额外返回所用层级与 rich 层失败原因。"""

        base = strip_system_messages(conversation)

        failure_reason = None
        try:
            system_text = await self._rich_system_prompt()
            return Enrichment(messages=[ChatMessage(role="system", content=system_text)] + base, tier="rich")
        except Exception as exc:
            # rich 层失败不对用户暴露，只记录原因后降级
            failure_reason = f"{type(exc).__name__}: {exc}"
            logger.warning(
                "composer.rich_failed",
                extra={"extra": {"tool": self._companies_tool, "reason": failure_reason}},
            )

        descriptors = self._safe_descriptors(tools)
        if descriptors:
            system_text = render_system_prompt("tools_context", self._locale, tools=describe_tools(descriptors))
            logger.info("composer.degraded", extra={"extra": {"tools": len(descriptors)}})
            return Enrichment(
                messages=[ChatMessage(role="system", content=system_text)] + base,
                tier="degraded",
                failure_reason=failure_reason,
            )

        logger.info("composer.minimal")
        return Enrichment(messages=base, tier="minimal", failure_reason=failure_reason)

    async def _rich_system_prompt(self) -> str:
        payload = await self._session.call_tool(self._companies_tool)
        records = normalize_companies(payload)
        logger.info("composer.rich", extra={"extra": {"records": len(records)}})
        return render_system_prompt("company_context", self._locale, context=render_company_context(records))

    @staticmethod
    def _safe_descriptors(tools: Any) -> List[ToolDescriptor]:
        if not tools:
            return []
        try:
            return parse_tool_descriptors(tools)
        except Exception:
            logger.exception("composer.bad_tool_list")
            return []
