"""Chat Agent：对话历史、回合调度与面向用户的提示文本。

ChatAgent 把 SessionManager / ContextComposer / CompletionProvider 串起来：

- start(): 启动时执行一次 initialize 握手，返回一条状态提示。
- send(text): 执行一轮对话（工具发现 → 上下文增强 → 补全），返回助手回复。
- schedule(text): 以可取消的 asyncio.Task 延迟执行 send，新的调用会取消尚未完成的旧任务。

对话历史只保存 user/assistant 消息，system 消息每轮由 ContextComposer 重新生成。
"""

import asyncio
from typing import List, Optional

from mcp_chat_core.config.runtime import ConfigSource
from mcp_chat_core.context.composer import ContextComposer
from mcp_chat_core.domain.exceptions import CompletionError, ConfigError, MissingCredentialError, RpcError
from mcp_chat_core.domain.models import ChatMessage, SessionState
from mcp_chat_core.flows.graph import build_turn_graph, run_turn
from mcp_chat_core.infrastructure.logging.logger import logger
from mcp_chat_core.mcp.session import SessionManager
from mcp_chat_core.providers.base import CompletionProvider
from mcp_chat_core.tools.definitions import ToolDescriptor

CONFIGURE_KEY_TEXT = "Please configure your OpenAI API key first by clicking the settings button."
INVALID_KEY_TEXT = "Invalid API key. Please check your OpenAI API key configuration."
RATE_LIMIT_TEXT = "Rate limit exceeded. Please try again in a moment."
GENERIC_ERROR_TEXT = "Sorry, I encountered an error while processing your request."
RESPONSE_DELAY = 1.0


def describe_completion_error(error: Exception) -> str:
    """把补全错误转换成给最终用户看的提示。"""

    status = getattr(error, "status_code", None)
    if isinstance(error, MissingCredentialError):
        return CONFIGURE_KEY_TEXT
    if status == 401:
        return INVALID_KEY_TEXT
    if status == 429:
        return RATE_LIMIT_TEXT
    return GENERIC_ERROR_TEXT


def describe_initialize_error(error: RpcError, url: str) -> str:
    msg = f"MCP Server initialization failed for {url}."
    if error.status_code == 404:
        msg += " Please check the proxy configuration and ensure the MCP server is running."
    elif error.status_code == 406:
        msg += " Server returned 406 Not Acceptable. Please check the MCP server configuration."
    elif error.status_code == 0:
        msg += " This might be due to CORS issues or the server being unavailable."
    elif error.is_transport:
        msg += f" Error: {error.status_code} {error.status_text}"
    else:
        msg += f" Error: {error.message}"
    return msg


class ChatAgent:
    def __init__(
        self,
        config: ConfigSource,
        session: SessionManager,
        composer: ContextComposer,
        provider: CompletionProvider,
    ):
        self._config = config
        self._session = session
        self._graph = build_turn_graph(session, composer, provider)
        self._pending: Optional[asyncio.Task] = None
        self.history: List[ChatMessage] = []
        self.tools: List[ToolDescriptor] = []
        self.last_tier: Optional[str] = None

    @property
    def status(self) -> str:
        return self._session.state.label

    @property
    def session(self) -> SessionManager:
        return self._session

    @property
    def session_state(self) -> SessionState:
        return self._session.state

    async def start(self) -> str:
        """执行 initialize 握手并返回状态提示文本。失败不会阻止后续对话。"""

        url = self._config.get_mcp_server_url()
        try:
            await self._session.initialize()
        except RpcError as e:
            return describe_initialize_error(e, url)
        return f"MCP Server initialized successfully! Server at {url} is ready for use."

    async def send(self, text: str) -> Optional[str]:
        """执行一轮对话并返回要展示的文本；空输入返回 None。"""

        message = (text or "").strip()
        if not message:
            return None
        if not self._config.get_api_key():
            return CONFIGURE_KEY_TEXT

        self.history.append(ChatMessage(role="user", content=message))
        try:
            state = await run_turn(self._graph, self.history, self.tools)
        except (CompletionError, ConfigError) as e:
            logger.error(
                "agent.completion_failed",
                extra={"extra": {"code": e.code, "status": getattr(e, "status_code", None), "error": e.message}},
            )
            return describe_completion_error(e)

        self.tools = list(state.get("tools") or [])
        self.last_tier = state.get("tier")
        reply = state.get("reply") or ""
        self.history.append(ChatMessage(role="assistant", content=reply))
        return reply

    def schedule(self, text: str, delay: float = RESPONSE_DELAY) -> asyncio.Task:
        """延迟 delay 秒后执行 send；若已有未完成的回合则先取消它。"""

        self.cancel_pending()

        async def _run() -> Optional[str]:
            await asyncio.sleep(delay)
            return await self.send(text)

        self._pending = asyncio.get_running_loop().create_task(_run())
        return self._pending

    def cancel_pending(self) -> bool:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
            logger.info("agent.pending_cancelled")
            return True
        return False

    def clear(self) -> None:
        self.cancel_pending()
        self.history = []
