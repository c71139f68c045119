"""MCP 会话管理。

SessionManager 是 SessionState 的唯一写入者：

- initialize(): 完成 initialize 握手（协议版本 2024-11-05）。
- check_health(): GET <rpc_path>/health，status == "ok" 视为健康。
- list_tools() / call_tool() / call_method(): 普通调用，每次调用后重新评估状态。

状态可以被任意协作者读取（state 属性）或订阅（subscribe），但不能被外部修改。
"""

from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from mcp_chat_core.domain.exceptions import RpcError
from mcp_chat_core.domain.models import HealthReport, SessionState
from mcp_chat_core.infrastructure.logging.logger import logger
from mcp_chat_core.mcp.rpc import RpcClient
from mcp_chat_core.tools.definitions import ToolCall

PROTOCOL_VERSION = "2024-11-05"

StateListener = Callable[[SessionState, SessionState], None]


class SessionManager:
    def __init__(self, rpc: RpcClient, client_name: str = "mcp-chat-core", client_version: str = "1.0.0"):
        self._rpc = rpc
        self._client_info = {"name": client_name, "version": client_version}
        self._state = SessionState.UNKNOWN
        self._listeners: List[StateListener] = []
        self.server_info: Optional[Dict[str, Any]] = None

    @property
    def state(self) -> SessionState:
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """注册状态变化回调 ``listener(old, new)``，返回取消订阅函数。"""

        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _set_state(self, new: SessionState) -> None:
        old = self._state
        self._state = new
        if old == new:
            return
        logger.info("session.state", extra={"extra": {"from": old.value, "to": new.value}})
        for listener in list(self._listeners):
            try:
                listener(old, new)
            except Exception:
                # 观察者的异常不能影响会话本身
                logger.exception("session.listener_failed")

    async def initialize(self) -> Any:
        """执行 initialize 握手，成功返回服务端协商结果。

        失败时状态切换为 UNAVAILABLE 并继续抛出 RpcError。
        """

        self._set_state(SessionState.CHECKING)
        params = {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {},
            "clientInfo": dict(self._client_info),
        }
        try:
            result = await self._rpc.call("initialize", params)
        except RpcError as e:
            self._set_state(SessionState.UNAVAILABLE)
            logger.error(
                "session.initialize_failed",
                extra={"extra": {"kind": e.kind, "status": e.status_code, "error": e.message}},
            )
            raise
        self.server_info = result if isinstance(result, dict) else None
        self._set_state(SessionState.HEALTHY)
        logger.info("session.initialized", extra={"extra": {"url": self._rpc.endpoint()}})
        return result

    async def check_health(self) -> HealthReport:
        """探测 /health。status 字段为 "ok" 视为健康，其他值视为不健康。"""

        self._set_state(SessionState.CHECKING)
        try:
            data = await self._rpc.get_json(f"{self._rpc.rpc_path}/health")
        except RpcError:
            self._set_state(SessionState.UNAVAILABLE)
            raise
        ok = isinstance(data, dict) and data.get("status") == "ok"
        self._set_state(SessionState.HEALTHY if ok else SessionState.UNAVAILABLE)
        return HealthReport(
            status="healthy" if ok else "unhealthy",
            timestamp=datetime.now(timezone.utc).isoformat(),
            data=data,
        )

    async def call_method(self, method: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """调用任意 JSON-RPC 方法，并根据结果更新会话状态。

        远端返回 JSON-RPC error 说明服务本身可达，状态记为 HEALTHY；
        传输或帧格式错误记为 UNAVAILABLE。
        """

        try:
            result = await self._rpc.call(method, params)
        except RpcError as e:
            self._set_state(SessionState.HEALTHY if e.is_protocol else SessionState.UNAVAILABLE)
            raise
        self._set_state(SessionState.HEALTHY)
        return result

    async def list_tools(self) -> Any:
        """tools/list 的原始结果，结构校验交给调用方（见 parse_tool_descriptors）。"""

        logger.info("session.list_tools")
        return await self.call_method("tools/list")

    async def call_tool(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> Any:
        call = ToolCall(name=name, arguments=arguments or {})
        logger.info("session.call_tool", extra={"extra": {"tool": name, "arguments": call.arguments}})
        return await self.call_method("tools/call", call.to_params())

    async def get_diagnostic(self) -> Any:
        """调用服务端的 diagnostic 工具。"""

        return await self.call_tool("diagnostic")
