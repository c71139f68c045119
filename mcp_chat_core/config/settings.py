"""配置管理模块。

支持从环境变量、.env 以及 config.yaml 加载配置，优先级依次降低。
"""

import warnings
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _load_config_from_yaml() -> Dict[str, Any]:
    """从 config.yaml 加载配置（若存在）。"""
    candidates = []
    explicit = os.getenv("MCP_CHAT_CONFIG_FILE")
    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.extend([
        Path.cwd() / "config.yaml",
        Path(__file__).resolve().parents[2] / "config.yaml",
    ])

    seen: set[Path] = set()
    for path in candidates:
        if not path or path in seen:
            continue
        seen.add(path)
        try:
            if path.exists():
                data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
                if isinstance(data, dict):
                    return data
                warnings.warn(f"Config file {path} is not a mapping, ignored")
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(f"Failed to read config file {path}: {exc}")
    return {}


class Settings(BaseSettings):
    """配置设置（使用 Pydantic）。"""

    # ---- OpenAI 补全接口 ----
    openai_api_key: str = Field(default="", description="OpenAI API 密钥，空字符串表示未配置")
    completion_url: str = Field(
        default="https://api.openai.com/v1/chat/completions",
        description="Chat completions 接口完整 URL",
    )
    default_model: str = Field(
        default="chat",
        description="逻辑模型名，由 registry 映射为具体厂商模型",
    )

    # ---- MCP 服务 ----
    mcp_server_url: str = Field(default="http://localhost:3100", description="MCP 服务（或代理）基础 URL")
    mcp_rpc_path: str = Field(default="/mcp", description="JSON-RPC 端点相对路径，/health 挂在其下")
    client_name: str = Field(default="mcp-chat-core", description="initialize 握手中上报的客户端名称")
    client_version: str = Field(default="1.0.0", description="initialize 握手中上报的客户端版本")
    companies_tool: str = Field(default="getCompanies", description="富数据层调用的领域工具名")

    http_timeout: float = Field(default=30.0, ge=1.0, description="HTTP 超时时间（秒）")
    log_dir: str = Field(default="logs", description="日志目录")
    log_redact_content: bool = Field(default=False, description="是否脱敏日志内容")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @staticmethod
    def _config_source() -> Dict[str, Any]:
        return _load_config_from_yaml()

    @field_validator("openai_api_key")
    @classmethod
    def strip_api_key(cls, v: Optional[str]) -> str:
        return (v or "").strip()

    @field_validator("mcp_server_url", "completion_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.strip().rstrip("/")

    @field_validator("mcp_rpc_path")
    @classmethod
    def normalize_rpc_path(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v.startswith("/"):
            v = "/" + v
        return v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            cls._config_source,
            file_secret_settings,
        )


settings = Settings()
