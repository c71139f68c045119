"""JSON-RPC 2.0 over HTTP 客户端。

本模块负责：

1. 为每次调用生成递增 id，构造 ``{jsonrpc, id, method, params}`` 请求体。
2. 以 POST 发送到 MCP 端点，并按原始文本读取响应（不能让传输层按 JSON 解析）。
3. 交给 frame.decode_frame 解码，把各类失败统一包装成 RpcError。

不做任何重试，重试/退避属于调用方策略。
"""

import itertools
from typing import Any, Dict, Optional

import httpx

from mcp_chat_core.config.runtime import ConfigSource
from mcp_chat_core.domain.exceptions import FrameError, RemoteError, RpcError
from mcp_chat_core.infrastructure.logging.logger import logger
from mcp_chat_core.mcp.frame import decode_frame

JSONRPC_VERSION = "2.0"
RPC_HEADERS = {
    "Accept": "application/json, text/event-stream",
    "Content-Type": "application/json",
}


class RpcClient:
    """单次 JSON-RPC 调用的发起者。

    - config: 提供当前 MCP 基础 URL（每次调用时读取，支持运行时修改）。
    - rpc_path: JSON-RPC 端点相对路径，例如 "/mcp"。
    """

    def __init__(self, config: ConfigSource, rpc_path: str = "/mcp", timeout: float = 30.0):
        self._config = config
        self._rpc_path = rpc_path
        self._timeout = timeout
        # itertools.count 保证同一个客户端内并发请求的 id 严格递增、不重复
        self._ids = itertools.count(1)

    @property
    def rpc_path(self) -> str:
        return self._rpc_path

    def endpoint(self, path: Optional[str] = None) -> str:
        base = self._config.get_mcp_server_url().rstrip("/")
        return f"{base}{path if path is not None else self._rpc_path}"

    def build_request(self, method: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return {
            "jsonrpc": JSONRPC_VERSION,
            "id": next(self._ids),
            "method": method,
            "params": params if params is not None else {},
        }

    async def call(self, method: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """执行一次 JSON-RPC 调用并返回 result。

        Raises:
            RpcError: kind 为 transport / protocol / framing 之一。
        """

        payload = self.build_request(method, params)
        url = self.endpoint()
        logger.info("rpc.call", extra={"extra": {"method": method, "id": payload["id"], "url": url}})
        try:
            async with httpx.AsyncClient(timeout=self._timeout, trust_env=False) as client:
                resp = await client.post(url, json=payload, headers=RPC_HEADERS)
        except httpx.RequestError as e:
            # 网络错误：DNS 失败、连接超时等，没有状态码
            raise self._transport_error(method, 0, type(e).__name__, e) from e

        if resp.status_code < 200 or resp.status_code >= 300:
            raise self._transport_error(method, resp.status_code, resp.reason_phrase, None)

        try:
            return decode_frame(resp.text)
        except RemoteError as e:
            logger.warning(
                "rpc.remote_error",
                extra={"extra": {"method": method, "rpc_code": e.rpc_code, "error": e.message}},
            )
            raise RpcError(
                RpcError.PROTOCOL,
                f"MCP Error: {e.message}",
                method=method,
                rpc_code=e.rpc_code,
                cause=e,
            ) from e
        except FrameError as e:
            logger.warning("rpc.framing_error", extra={"extra": {"method": method, "error": e.message}})
            raise RpcError(RpcError.FRAMING, e.message, method=method, cause=e) from e

    async def get_json(self, path: str) -> Any:
        """对 MCP 服务发起一次普通 GET（例如 /health），按 JSON 解析响应。"""

        url = self.endpoint(path)
        try:
            async with httpx.AsyncClient(timeout=self._timeout, trust_env=False) as client:
                resp = await client.get(url, headers={"Accept": "application/json"})
        except httpx.RequestError as e:
            raise self._transport_error(f"GET {path}", 0, type(e).__name__, e) from e
        if resp.status_code < 200 or resp.status_code >= 300:
            raise self._transport_error(f"GET {path}", resp.status_code, resp.reason_phrase, None)
        try:
            return resp.json()
        except ValueError as e:
            raise RpcError(RpcError.FRAMING, f"Invalid JSON from {path}: {e}", method=f"GET {path}", cause=e) from e

    @staticmethod
    def _transport_error(method: str, status_code: int, status_text: str, cause: Optional[BaseException]) -> RpcError:
        logger.warning(
            "rpc.transport_error",
            extra={"extra": {"method": method, "status": status_code, "status_text": status_text}},
        )
        detail = str(cause) if cause else f"{status_code} {status_text}"
        return RpcError(
            RpcError.TRANSPORT,
            f"MCP {method} request failed: {detail}",
            method=method,
            status_code=status_code,
            status_text=status_text,
            cause=cause,
        )
