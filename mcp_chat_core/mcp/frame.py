"""单事件帧解码。

MCP 服务端即使是非流式调用，也会用 event-stream 的形式回包：

    event: message
    data: {"jsonrpc": "2.0", "id": 1, "result": {...}}

这里把每个响应都当作“一个事件、一行 data”处理，不实现增量 SSE 解析。
"""

import json
from typing import Any

from mcp_chat_core.domain.exceptions import MalformedJsonError, MissingDataLineError, RemoteError

DATA_PREFIX = "data: "


def decode_frame(body: str) -> Any:
    """解析一个响应体，返回 JSON-RPC 的 result 字段。

    Raises:
        MissingDataLineError: 找不到以 ``data: `` 开头的行。
        MalformedJsonError: data 行不是合法的 JSON 对象。
        RemoteError: JSON 中带有 error 字段。
    """

    data_line = None
    # 只有 "\n"（可带 "\r"）是行分隔符；U+2028、\x85 可能原样出现在 JSON 字符串中
    for line in (body or "").split("\n"):
        if line.endswith("\r"):
            line = line[:-1]
        if line.startswith(DATA_PREFIX):
            data_line = line
            break
    if data_line is None:
        raise MissingDataLineError()

    try:
        parsed = json.loads(data_line[len(DATA_PREFIX):])
    except json.JSONDecodeError as exc:
        raise MalformedJsonError(f"Invalid JSON in data line: {exc}") from exc
    if not isinstance(parsed, dict):
        raise MalformedJsonError(f"Expected a JSON object, got {type(parsed).__name__}")

    error = parsed.get("error")
    if error is not None:
        if isinstance(error, dict):
            raise RemoteError(error.get("code"), str(error.get("message") or "Unknown MCP error"))
        raise RemoteError(None, str(error))
    return parsed.get("result")
