"""State definition for the chat turn graph."""

from __future__ import annotations

from typing import List, Optional, TypedDict

from mcp_chat_core.domain.models import ChatMessage
from mcp_chat_core.tools.definitions import ToolDescriptor


class TurnState(TypedDict, total=False):
    """State shared across the turn graph nodes."""

    messages: List[ChatMessage]
    tools: List[ToolDescriptor]
    enriched: List[ChatMessage]
    tier: str
    failure_reason: Optional[str]
    reply: Optional[str]
