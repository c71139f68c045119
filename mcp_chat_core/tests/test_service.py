import asyncio

import httpx

from mcp_chat_core.api import service
from mcp_chat_core.agents.chat_agent import CONFIGURE_KEY_TEXT


class Resp:
    status_code = 200
    reason_phrase = "OK"
    text = ""

    def __init__(self, data):
        self._data = data

    def json(self):
        return self._data


def test_default_agent_is_singleton_and_resettable():
    service.reset_agent()
    agent = service.get_default_agent()
    assert service.get_default_agent() is agent
    service.reset_agent()
    assert service.get_default_agent() is not agent
    service.reset_agent()


def test_send_message_without_key(monkeypatch):
    service.reset_agent()
    service.get_runtime_config().set_api_key("")
    result = asyncio.run(service.send_message("hello"))
    assert result["reply"] == CONFIGURE_KEY_TEXT
    assert result["mcp_status"] == "Unknown"
    service.reset_agent()


def test_check_mcp_health(monkeypatch):
    class Client:
        def __init__(self, *a, **kw):
            pass

        async def __aenter__(self):
            return self

        async def __aexit__(self, *a):
            return False

        async def get(self, url, headers=None, **_):
            return Resp({"status": "ok"})

    monkeypatch.setattr("httpx.AsyncClient", Client)
    service.reset_agent()
    result = asyncio.run(service.check_mcp_health())
    assert result["status"] == "healthy"
    assert result["mcp_status"] == "Healthy"
    service.reset_agent()


def test_check_mcp_health_unreachable(monkeypatch):
    class Client:
        def __init__(self, *a, **kw):
            pass

        async def __aenter__(self):
            return self

        async def __aexit__(self, *a):
            return False

        async def get(self, url, headers=None, **_):
            raise httpx.ConnectError("refused")

    monkeypatch.setattr("httpx.AsyncClient", Client)
    service.reset_agent()
    result = asyncio.run(service.check_mcp_health())
    assert result["status"] == "unhealthy"
    assert result["mcp_status"] == "Unavailable"
    service.reset_agent()
