"""Minimal terminal chat against the configured MCP server and OpenAI."""

import asyncio

from mcp_chat_core.api.service import check_mcp_health, get_default_agent, send_message
from mcp_chat_core.context import company_context_from_payload
from mcp_chat_core.domain.exceptions import RpcError


async def main() -> None:
    agent = get_default_agent()
    print(await agent.start())
    print("MCP status:", agent.status)
    while True:
        try:
            text = input("You: ").strip()
        except EOFError:
            break
        if text in {"/quit", "/exit"}:
            break
        if text == "/health":
            print(await check_mcp_health())
            continue
        if text == "/companies":
            try:
                payload = await agent.session.call_tool("getCompanies")
            except RpcError as e:
                print("MCP error:", e.message)
                continue
            print(company_context_from_payload(payload))
            continue
        if text == "/clear":
            agent.clear()
            print("Conversation cleared.")
            continue
        result = await send_message(text)
        if result["reply"]:
            print("Assistant:", result["reply"])
            print(f"  [context: {result['tier']}, MCP: {result['mcp_status']}]")


if __name__ == "__main__":
    asyncio.run(main())
