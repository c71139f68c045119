"""运行时配置读取。

核心只需要两个同步读取：当前补全用的 API Key 与当前 MCP 服务地址。
``RuntimeConfig`` 把二者保存在内存中（初始值来自 ``Settings``），UI 可以在不重启的情况下修改；
持久化由 UI 一侧负责。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Protocol

from mcp_chat_core.config.settings import Settings

DEFAULT_MCP_URL = "http://localhost:3100"


class ConfigSource(Protocol):
    """客户端使用的凭据 / 地址读取接口。"""

    def get_api_key(self) -> str:
        ...

    def get_mcp_server_url(self) -> str:
        ...


@dataclass
class RuntimeConfig:
    """用户可修改配置的内存视图。"""

    openai_api_key: str = ""
    mcp_server_url: str = DEFAULT_MCP_URL

    @classmethod
    def from_settings(cls, settings: Settings) -> "RuntimeConfig":
        return cls(
            openai_api_key=settings.openai_api_key,
            mcp_server_url=settings.mcp_server_url or DEFAULT_MCP_URL,
        )

    def get_api_key(self) -> str:
        return self.openai_api_key

    def get_mcp_server_url(self) -> str:
        return self.mcp_server_url

    def set_api_key(self, api_key: str) -> None:
        self.openai_api_key = (api_key or "").strip()

    def set_mcp_server_url(self, url: str) -> None:
        self.mcp_server_url = (url or "").strip().rstrip("/") or DEFAULT_MCP_URL

    def update(self, api_key: Optional[str] = None, mcp_server_url: Optional[str] = None) -> None:
        """只更新传入的字段；为 ``None`` 的字段保持不变。"""

        if api_key is not None:
            self.set_api_key(api_key)
        if mcp_server_url is not None:
            self.set_mcp_server_url(mcp_server_url)

    def clear(self) -> None:
        self.openai_api_key = ""
        self.mcp_server_url = DEFAULT_MCP_URL

    @property
    def is_api_key_configured(self) -> bool:
        return bool(self.openai_api_key)

    def is_valid(self) -> bool:
        return bool(self.openai_api_key) and bool(self.mcp_server_url)

    def export(self) -> Dict[str, str]:
        # 导出时不包含 API Key
        return {"mcp_server_url": self.mcp_server_url}
