"""MCP Chat Core 顶层包。

该包提供基于 MCP (Model Context Protocol) 的对话核心实现，
包括配置加载、JSON-RPC 会话客户端、上下文增强（三层降级）、
补全接口适配与单轮对话流程。
"""

from mcp_chat_core.agents.chat_agent import ChatAgent
from mcp_chat_core.context.composer import ContextComposer
from mcp_chat_core.mcp.rpc import RpcClient
from mcp_chat_core.mcp.session import SessionManager
from mcp_chat_core.providers.openai_client import OpenAIClient

__all__ = ["ChatAgent", "ContextComposer", "RpcClient", "SessionManager", "OpenAIClient"]
