"""工具数据结构定义。

这些 dataclass 描述 MCP 服务端公开的“工具”：
- ToolDescriptor: tools/list 返回的工具名与说明，用于降级层生成工具说明文本。
- ToolCall: 一次 tools/call 调用的参数（name + arguments）。

tools/list 的返回结构没有严格约定，parse_tool_descriptors 只按结构做防御式提取。
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class ToolDescriptor:
    """MCP 服务端公开的一个工具。"""

    name: str
    description: Optional[str] = None


@dataclass
class ToolCall:
    """一次 tools/call 请求。"""

    name: str
    arguments: Dict[str, Any] = field(default_factory=dict)

    def to_params(self) -> Dict[str, Any]:
        return {"name": self.name, "arguments": self.arguments}


def parse_tool_descriptors(payload: Any) -> List[ToolDescriptor]:
    """把 tools/list 的 result 转成 ToolDescriptor 列表。

    接受 ``{"tools": [...]}`` 或直接的列表；没有字符串 name 的条目会被跳过，
    无法识别的结构返回空列表，不抛异常。
    """

    if isinstance(payload, dict):
        items = payload.get("tools")
    else:
        items = payload
    if not isinstance(items, list):
        return []

    tools: List[ToolDescriptor] = []
    for item in items:
        if isinstance(item, ToolDescriptor):
            tools.append(item)
            continue
        if not isinstance(item, dict):
            continue
        name = item.get("name")
        if not isinstance(name, str) or not name:
            continue
        description = item.get("description")
        tools.append(ToolDescriptor(name=name, description=description if isinstance(description, str) else None))
    return tools
