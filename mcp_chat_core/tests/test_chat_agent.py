import asyncio

from mcp_chat_core.agents.chat_agent import (
    CONFIGURE_KEY_TEXT,
    GENERIC_ERROR_TEXT,
    INVALID_KEY_TEXT,
    RATE_LIMIT_TEXT,
    ChatAgent,
    describe_completion_error,
)
from mcp_chat_core.config.runtime import RuntimeConfig
from mcp_chat_core.context.composer import ContextComposer
from mcp_chat_core.domain.exceptions import (
    EmptyResponseError,
    InvalidCredentialError,
    RateLimitError,
    RpcError,
    TransportError,
)
from mcp_chat_core.domain.models import SessionState
from mcp_chat_core.mcp.session import SessionManager
from mcp_chat_core.providers.openai_client import OpenAIClient


class FakeRpc:
    rpc_path = "/mcp"

    def __init__(self, error=None):
        self.error = error

    def endpoint(self, path=None):
        return "http://mcp.local/mcp"

    async def call(self, method, params=None):
        if self.error:
            raise self.error
        if method == "tools/list":
            return {"tools": [{"name": "getCompanies", "description": "List companies"}]}
        if method == "tools/call":
            return {"companies": [{"company": "Acme", "description": "d"}]}
        return {"protocolVersion": "2024-11-05"}


class FakeProvider:
    name = "fake"

    def __init__(self, reply="hello!", error=None):
        self.reply = reply
        self.error = error
        self.calls = 0

    async def complete(self, messages):
        self.calls += 1
        if self.error:
            raise self.error
        return self.reply


def make_agent(api_key="sk-test", rpc_error=None, provider=None):
    config = RuntimeConfig(openai_api_key=api_key, mcp_server_url="http://mcp.local")
    session = SessionManager(FakeRpc(rpc_error))
    provider = provider or FakeProvider()
    return ChatAgent(config, session, ContextComposer(session), provider), provider


def test_start_reports_success_and_failure():
    agent, _ = make_agent()
    assert agent.status == "Unknown"
    msg = asyncio.run(agent.start())
    assert "initialized successfully" in msg
    assert agent.session_state is SessionState.HEALTHY

    agent, _ = make_agent(rpc_error=RpcError(RpcError.TRANSPORT, "nf", status_code=404, status_text="Not Found"))
    msg = asyncio.run(agent.start())
    assert "initialization failed for http://mcp.local" in msg
    assert "proxy configuration" in msg
    assert agent.status == "Unavailable"


def test_send_without_key_does_not_call_provider():
    agent, provider = make_agent(api_key="")
    assert asyncio.run(agent.send("hi")) == CONFIGURE_KEY_TEXT
    assert provider.calls == 0
    assert agent.history == []


def test_send_blank_input_is_ignored():
    agent, provider = make_agent()
    assert asyncio.run(agent.send("   ")) is None
    assert provider.calls == 0


def test_send_records_history():
    agent, _ = make_agent()
    assert asyncio.run(agent.send("What AI companies are available?")) == "hello!"
    assert [(m.role, m.content) for m in agent.history] == [
        ("user", "What AI companies are available?"),
        ("assistant", "hello!"),
    ]
    assert agent.last_tier == "rich"
    assert [t.name for t in agent.tools] == ["getCompanies"]


def test_send_maps_completion_errors_to_user_text():
    agent, _ = make_agent(provider=FakeProvider(error=InvalidCredentialError(401, "Unauthorized")))
    assert asyncio.run(agent.send("hi")) == INVALID_KEY_TEXT
    # the user message stays in history, no assistant reply is added
    assert [m.role for m in agent.history] == ["user"]

    assert describe_completion_error(RateLimitError(429, "Too Many Requests")) == RATE_LIMIT_TEXT
    assert describe_completion_error(TransportError(500, "Server Error")) == GENERIC_ERROR_TEXT
    assert describe_completion_error(EmptyResponseError()) == GENERIC_ERROR_TEXT


def test_send_works_when_mcp_is_down():
    agent, provider = make_agent(rpc_error=RpcError(RpcError.TRANSPORT, "down", status_code=0))
    assert asyncio.run(agent.send("hi")) == "hello!"
    assert agent.last_tier == "minimal"
    assert agent.status == "Unavailable"


def test_schedule_cancels_superseded_turn():
    agent, provider = make_agent()

    async def run():
        first = agent.schedule("first", delay=10)
        second = agent.schedule("second", delay=0)
        reply = await second
        await asyncio.sleep(0)
        return first, reply

    first, reply = asyncio.run(run())
    assert first.cancelled()
    assert reply == "hello!"
    assert provider.calls == 1
    assert [m.content for m in agent.history] == ["second", "hello!"]


def test_clear_resets_history():
    agent, _ = make_agent()
    asyncio.run(agent.send("hi"))
    agent.clear()
    assert agent.history == []


def test_send_maps_garbled_completion_body_to_generic_text(monkeypatch):
    class HtmlResp:
        status_code = 200
        reason_phrase = "OK"
        text = "<html>maintenance</html>"

        def json(self):
            raise ValueError("Expecting value")

    class Client:
        def __init__(self, *a, **kw):
            pass

        async def __aenter__(self):
            return self

        async def __aexit__(self, *a):
            return False

        async def post(self, url, json=None, headers=None, **_):
            return HtmlResp()

    monkeypatch.setattr("httpx.AsyncClient", Client)
    agent, _ = make_agent(provider=OpenAIClient(RuntimeConfig(openai_api_key="sk-test")))
    assert asyncio.run(agent.send("hi")) == GENERIC_ERROR_TEXT
    assert [m.role for m in agent.history] == ["user"]
