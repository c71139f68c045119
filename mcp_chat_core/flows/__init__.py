"""LangGraph-based turn flow (tool discovery, enrichment, completion)."""

from mcp_chat_core.flows.graph import build_turn_graph, run_turn
from mcp_chat_core.flows.state import TurnState

__all__ = ["build_turn_graph", "run_turn", "TurnState"]
