"""对外 API 服务模块。

提供简化的函数接口供上层应用（UI、脚本）调用。
"""

from typing import Any, Dict, Optional

from mcp_chat_core.agents.chat_agent import ChatAgent
from mcp_chat_core.config.runtime import RuntimeConfig
from mcp_chat_core.config.settings import settings
from mcp_chat_core.context.composer import ContextComposer
from mcp_chat_core.domain.exceptions import RpcError
from mcp_chat_core.infrastructure.logging.logger import logger
from mcp_chat_core.mcp.rpc import RpcClient
from mcp_chat_core.mcp.session import SessionManager
from mcp_chat_core.providers import create_provider


_config: Optional[RuntimeConfig] = None
_agent: Optional[ChatAgent] = None


def get_runtime_config() -> RuntimeConfig:
    global _config
    if _config is None:
        _config = RuntimeConfig.from_settings(settings)
    return _config


def get_default_agent() -> ChatAgent:
    """获取默认的 ChatAgent 实例（单例）。"""
    global _agent
    if _agent is None:
        config = get_runtime_config()
        rpc = RpcClient(config, rpc_path=settings.mcp_rpc_path, timeout=settings.http_timeout)
        session = SessionManager(rpc, client_name=settings.client_name, client_version=settings.client_version)
        composer = ContextComposer(session, companies_tool=settings.companies_tool)
        _agent = ChatAgent(config, session, composer, create_provider(config))
    return _agent


def reset_agent() -> None:
    """丢弃单例，下次调用时按最新配置重建。"""
    global _agent, _config
    if _agent is not None:
        _agent.clear()
    _agent = None
    _config = None


async def send_message(user_input: str) -> Dict[str, Any]:
    """运行一轮对话。

    Returns:
        包含回复文本、所用增强层级与 MCP 状态的字典
    """
    agent = get_default_agent()
    reply = await agent.send(user_input)
    return {
        "reply": reply,
        "tier": agent.last_tier,
        "mcp_status": agent.status,
    }


async def check_mcp_health() -> Dict[str, Any]:
    """探测 MCP /health，失败时返回 unhealthy 而不是抛异常。"""
    agent = get_default_agent()
    try:
        report = await agent.session.check_health()
    except RpcError as e:
        logger.error("service.health_failed", extra={"extra": {"status": e.status_code, "error": e.message}})
        return {"status": "unhealthy", "error": e.message, "mcp_status": agent.status}
    return {
        "status": report.status,
        "timestamp": report.timestamp,
        "data": report.data,
        "server_type": report.server_type,
        "mcp_status": agent.status,
    }
