"""LLM Provider 集成层。

该包下的模块负责：
- 定义 Provider 抽象接口 (base)。
- 维护 Provider 与模型配置 (registry)。
- 提供具体实现 (openai_client)。
"""

from typing import Optional

from mcp_chat_core.config.runtime import ConfigSource
from mcp_chat_core.config.settings import settings
from mcp_chat_core.providers.base import CompletionProvider
from mcp_chat_core.providers.openai_client import OpenAIClient


def create_provider(config: ConfigSource, model: Optional[str] = None) -> CompletionProvider:
    """根据配置创建补全客户端，默认取配置中的逻辑模型名。"""

    return OpenAIClient(
        config,
        model=model or getattr(settings, "default_model", "chat"),
        completion_url=getattr(settings, "completion_url", None),
        timeout=getattr(settings, "http_timeout", 30.0),
    )
