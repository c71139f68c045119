"""LangGraph construction for one chat turn.

discover_tools -> enrich -> complete. The steps run strictly in order: the
completion's system message depends on what the tool fetch produced.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from langgraph.graph import END, StateGraph
from langgraph.graph.state import CompiledStateGraph

from mcp_chat_core.context.composer import ContextComposer
from mcp_chat_core.domain.exceptions import RpcError
from mcp_chat_core.flows.state import TurnState
from mcp_chat_core.infrastructure.logging.logger import logger
from mcp_chat_core.mcp.session import SessionManager
from mcp_chat_core.providers.base import CompletionProvider
from mcp_chat_core.tools.definitions import ToolDescriptor, parse_tool_descriptors


def build_turn_graph(
    session: SessionManager,
    composer: ContextComposer,
    provider: CompletionProvider,
) -> CompiledStateGraph:
    async def discover_tools(state: TurnState) -> TurnState:
        try:
            payload = await session.list_tools()
        except RpcError as exc:
            # keep the caller's cached descriptors, if any
            logger.warning(
                "turn.list_tools_failed",
                extra={"extra": {"kind": exc.kind, "error": exc.message}},
            )
            return {"tools": list(state.get("tools") or [])}
        tools = parse_tool_descriptors(payload)
        logger.info("turn.tools", extra={"extra": {"tools": [t.name for t in tools]}})
        return {"tools": tools}

    async def enrich(state: TurnState) -> TurnState:
        result = await composer.compose(state["messages"], state.get("tools"))
        return {"enriched": result.messages, "tier": result.tier, "failure_reason": result.failure_reason}

    async def complete(state: TurnState) -> TurnState:
        reply = await provider.complete(state["enriched"])
        return {"reply": reply}

    graph = StateGraph(TurnState)
    graph.add_node("discover_tools", discover_tools)
    graph.add_node("enrich", enrich)
    graph.add_node("complete", complete)
    graph.set_entry_point("discover_tools")
    graph.add_edge("discover_tools", "enrich")
    graph.add_edge("enrich", "complete")
    graph.add_edge("complete", END)
    return graph.compile()


async def run_turn(
    graph: CompiledStateGraph,
    messages: Iterable[Any],
    tools: Optional[Iterable[ToolDescriptor]] = None,
) -> TurnState:
    """Run one turn and return the final state; completion errors propagate."""

    state: TurnState = {
        "messages": list(messages),
        "tools": list(tools or []),
        "enriched": [],
        "tier": "minimal",
        "failure_reason": None,
        "reply": None,
    }
    return await graph.ainvoke(state)
