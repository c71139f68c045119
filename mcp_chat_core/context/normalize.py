"""公司数据归一化。

getCompanies 工具的返回结构并不是固定契约，这里按顺序尝试若干“形状提取器”，
第一个能识别的提取器决定结果：

1. ``{"content": [{"text": "<json>"}]}``：解析 text 中的 JSON。
2. 直接是列表。
3. ``{"companies": [...]}``。
4. 其他非空对象：包成单元素列表。

都不匹配时返回空列表（调用方渲染为“无数据”占位文本，不视为失败）。
"""

import json
from typing import Any, Callable, List, Optional, Sequence

from mcp_chat_core.domain.exceptions import NormalizationError

# 提取器返回 None 表示“不是我认识的形状”，交给下一个提取器
ShapeExtractor = Callable[[Any], Optional[List[Any]]]


def _from_text_content(payload: Any) -> Optional[List[Any]]:
    if not isinstance(payload, dict):
        return None
    content = payload.get("content")
    if not isinstance(content, list) or not content:
        return None
    first = content[0]
    if not isinstance(first, dict) or not isinstance(first.get("text"), str):
        return None
    try:
        parsed = json.loads(first["text"])
    except json.JSONDecodeError as exc:
        raise NormalizationError(f"Tool text content is not valid JSON: {exc}") from exc
    if parsed is None:
        return []
    for extract in (_from_list, _from_companies_field):
        records = extract(parsed)
        if records is not None:
            return records
    return [parsed]


def _from_list(payload: Any) -> Optional[List[Any]]:
    return list(payload) if isinstance(payload, list) else None


def _from_companies_field(payload: Any) -> Optional[List[Any]]:
    if isinstance(payload, dict) and isinstance(payload.get("companies"), list):
        return list(payload["companies"])
    return None


def _from_object(payload: Any) -> Optional[List[Any]]:
    if isinstance(payload, dict) and payload:
        return [payload]
    return None


SHAPE_EXTRACTORS: Sequence[ShapeExtractor] = (
    _from_text_content,
    _from_list,
    _from_companies_field,
    _from_object,
)


def normalize_companies(payload: Any) -> List[Any]:
    """把工具返回值归一化为公司记录列表。

    Raises:
        NormalizationError: content[0].text 存在但不是合法 JSON。
    """

    for extract in SHAPE_EXTRACTORS:
        records = extract(payload)
        if records is not None:
            return records
    return []
