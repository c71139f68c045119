"""MCP 客户端：帧解码 (frame)、JSON-RPC 调用 (rpc)、会话管理 (session)。"""

from mcp_chat_core.mcp.frame import decode_frame
from mcp_chat_core.mcp.rpc import RpcClient
from mcp_chat_core.mcp.session import PROTOCOL_VERSION, SessionManager

__all__ = ["decode_frame", "RpcClient", "SessionManager", "PROTOCOL_VERSION"]
