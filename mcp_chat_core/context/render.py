"""把公司记录渲染成注入 system 消息的纯文本块。"""

from typing import Any, Iterable, List

from mcp_chat_core.context.normalize import normalize_companies
from mcp_chat_core.domain.exceptions import NormalizationError

NO_DATA_TEXT = "No company data available."
PARSE_ERROR_TEXT = "Error parsing company data."


def _names(items: Any, key: str) -> List[str]:
    if not isinstance(items, list):
        return []
    names = []
    for item in items:
        if isinstance(item, dict):
            value = item.get(key)
        else:
            value = item
        if value not in (None, ""):
            names.append(str(value))
    return names


def _llm_labels(items: Any) -> List[str]:
    if not isinstance(items, list):
        return []
    labels = []
    for item in items:
        if not isinstance(item, dict):
            if item not in (None, ""):
                labels.append(str(item))
            continue
        name = item.get("llm") or item.get("name")
        if not name:
            continue
        specialization = item.get("specialization")
        labels.append(f"{name} ({specialization})" if specialization else str(name))
    return labels


def render_company(record: Any) -> str:
    """每家公司渲染为一个带标签的文本块，缺失字段使用占位文本。"""

    if not isinstance(record, dict):
        record = {"company": record}
    name = record.get("company") or record.get("name") or "Unknown"
    description = record.get("description") or "No description available"
    chatbots = ", ".join(_names(record.get("chats"), "chatbot")) or "None"
    llms = ", ".join(_llm_labels(record.get("llms"))) or "None"
    return "\n".join([
        f"Company: {name}",
        f"Description: {description}",
        f"Chatbots: {chatbots}",
        f"LLM Models: {llms}",
    ])


def render_company_context(records: Iterable[Any]) -> str:
    blocks = [render_company(r) for r in records]
    if not blocks:
        return NO_DATA_TEXT
    return "\n\n".join(blocks)


def company_context_from_payload(payload: Any) -> str:
    """一步完成归一化与渲染，不会抛异常。

    无法解析的返回值渲染为解析失败占位文本。
    """

    try:
        records = normalize_companies(payload)
    except NormalizationError:
        return PARSE_ERROR_TEXT
    return render_company_context(records)
