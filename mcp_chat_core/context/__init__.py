"""对话上下文增强：归一化 (normalize)、渲染 (render)、三层降级组合 (composer)。"""

from mcp_chat_core.context.composer import ContextComposer, strip_system_messages
from mcp_chat_core.context.normalize import normalize_companies
from mcp_chat_core.context.render import (
    NO_DATA_TEXT,
    PARSE_ERROR_TEXT,
    company_context_from_payload,
    render_company,
    render_company_context,
)

__all__ = [
    "ContextComposer",
    "strip_system_messages",
    "normalize_companies",
    "render_company",
    "render_company_context",
    "company_context_from_payload",
    "NO_DATA_TEXT",
    "PARSE_ERROR_TEXT",
]
