"""统一业务异常模型。

所有跨模块抛出的业务级错误都应该继承自 BusinessError，
便于在 Agent 层或 UI 层做统一捕获与用户提示。

错误分层：
- FrameError: 单事件 `data: ` 帧解析失败（缺少 data 行、JSON 非法、远端返回 error）。
- RpcError: 一次 JSON-RPC 调用失败，区分 transport / protocol / framing 三类原因。
- ConfigError: 配置缺失（例如未设置 API Key）。
- CompletionError: 调用补全接口失败（空响应、HTTP 传输错误）。
- NormalizationError: 工具返回的领域数据结构无法识别。
"""

from typing import Any, Optional


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "MISSING_DATA_LINE"）。
        message: 用户可读错误信息。
        http_status: 映射到 HTTP 时可用的状态码，默认 400。
        extra: 其他补充字段（例如 method、trace_id 等）。
    """

    def __init__(self, code: str, message: str, http_status: int = 400, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


# ---- Frame ----


class FrameError(BusinessError):
    """响应体不符合单事件 `data: <json>` 帧格式。"""


class MissingDataLineError(FrameError):
    def __init__(self, message: str = "Invalid SSE response format: no data line"):
        super().__init__(code="MISSING_DATA_LINE", message=message)


class MalformedJsonError(FrameError):
    def __init__(self, message: str):
        super().__init__(code="MALFORMED_JSON", message=message)


class RemoteError(FrameError):
    """服务端在帧内返回了 JSON-RPC error 对象。"""

    def __init__(self, rpc_code: Any, message: str):
        self.rpc_code = rpc_code
        super().__init__(code="REMOTE_ERROR", message=message, rpc_code=rpc_code)


# ---- RPC ----


class RpcError(BusinessError):
    """一次 JSON-RPC 调用失败。

    kind:
        - "transport": HTTP 非 2xx 或网络错误（status_code=0 表示未拿到响应）。
        - "protocol": 服务端返回了 JSON-RPC error（rpc_code + message）。
        - "framing": 响应体无法按帧格式解析。
    """

    TRANSPORT = "transport"
    PROTOCOL = "protocol"
    FRAMING = "framing"

    def __init__(
        self,
        kind: str,
        message: str,
        *,
        method: Optional[str] = None,
        status_code: Optional[int] = None,
        status_text: Optional[str] = None,
        rpc_code: Any = None,
        cause: Optional[BaseException] = None,
    ):
        self.kind = kind
        self.method = method
        self.status_code = status_code
        self.status_text = status_text
        self.rpc_code = rpc_code
        self.cause = cause
        super().__init__(
            code=f"RPC_{kind.upper()}",
            message=message,
            http_status=status_code or 502,
            method=method,
        )

    @property
    def is_transport(self) -> bool:
        return self.kind == self.TRANSPORT

    @property
    def is_protocol(self) -> bool:
        return self.kind == self.PROTOCOL


# ---- Config ----


class ConfigError(BusinessError):
    """参数或配置校验失败。"""


class MissingCredentialError(ConfigError):
    def __init__(self, message: str = "OpenAI API key not set"):
        super().__init__(code="MISSING_CREDENTIAL", message=message)


# ---- Completion ----


class CompletionError(BusinessError):
    """补全接口调用失败，作为一轮对话的终点错误直接抛给调用方。"""


class EmptyResponseError(CompletionError):
    def __init__(self, message: str = "No response from OpenAI"):
        super().__init__(code="EMPTY_RESPONSE", message=message, http_status=502)


class TransportError(CompletionError):
    """HTTP 非 2xx 或网络错误。status_code=0 表示请求未送达。"""

    def __init__(self, status_code: int, status_text: str, message: Optional[str] = None):
        self.status_code = status_code
        self.status_text = status_text
        super().__init__(
            code="TRANSPORT",
            message=message or f"{status_code} {status_text}".strip(),
            http_status=status_code or 502,
        )


class InvalidCredentialError(TransportError):
    """HTTP 401：API Key 无效。"""


class RateLimitError(TransportError):
    """HTTP 429：限流，由上层负责重试/退避策略。"""


# ---- Domain payload ----


class NormalizationError(BusinessError):
    """工具返回的领域数据无法归一化（内部 JSON 非法等）。"""

    def __init__(self, message: str):
        super().__init__(code="NORMALIZATION_ERROR", message=message)
