import asyncio

import httpx
import pytest

from mcp_chat_core.config.runtime import RuntimeConfig
from mcp_chat_core.domain.exceptions import (
    ConfigError,
    EmptyResponseError,
    InvalidCredentialError,
    MissingCredentialError,
    RateLimitError,
    TransportError,
)
from mcp_chat_core.domain.models import ChatMessage
from mcp_chat_core.providers import create_provider
from mcp_chat_core.providers.openai_client import OpenAIClient

MESSAGES = [
    ChatMessage(role="system", content="ctx"),
    ChatMessage(role="user", content="hi there"),
]


class Resp:
    def __init__(self, data=None, status_code=200, reason_phrase="OK"):
        self._data = data
        self.status_code = status_code
        self.reason_phrase = reason_phrase
        self.text = str(data)

    def json(self):
        return self._data


def install_client(monkeypatch, response, captured):
    captured.setdefault("instances", 0)

    class Client:
        def __init__(self, *a, **kw):
            captured["instances"] += 1

        async def __aenter__(self):
            return self

        async def __aexit__(self, *a):
            return False

        async def post(self, url, json=None, headers=None, **_):
            captured["url"] = url
            captured["payload"] = json
            captured["headers"] = headers
            if isinstance(response, Exception):
                raise response
            return response

    monkeypatch.setattr("httpx.AsyncClient", Client)


def test_missing_credential_fails_before_network(monkeypatch):
    captured = {}
    install_client(monkeypatch, Resp({"choices": []}), captured)
    client = OpenAIClient(RuntimeConfig(openai_api_key=""))
    with pytest.raises(MissingCredentialError) as exc:
        asyncio.run(client.complete(MESSAGES))
    assert isinstance(exc.value, ConfigError)
    assert exc.value.code == "MISSING_CREDENTIAL"
    assert captured["instances"] == 0
    assert "payload" not in captured


def test_complete_returns_first_choice_and_sends_fixed_parameters(monkeypatch):
    captured = {}
    install_client(
        monkeypatch,
        Resp({"choices": [{"message": {"content": "hi", "role": "assistant"}}, {"message": {"content": "x"}}]}),
        captured,
    )
    client = OpenAIClient(RuntimeConfig(openai_api_key="sk-test"))

    assert asyncio.run(client.complete(MESSAGES)) == "hi"
    assert captured["url"] == "https://api.openai.com/v1/chat/completions"
    assert captured["payload"] == {
        "model": "gpt-3.5-turbo",
        "messages": [
            {"role": "system", "content": "ctx"},
            {"role": "user", "content": "hi there"},
        ],
        "max_tokens": 1000,
        "temperature": 0.7,
    }
    assert captured["headers"]["Authorization"] == "Bearer sk-test"
    assert captured["headers"]["Content-Type"] == "application/json"
    assert captured["headers"]["Accept"] == "application/json, text/event-stream"


def test_empty_choices(monkeypatch):
    install_client(monkeypatch, Resp({"choices": []}), {})
    with pytest.raises(EmptyResponseError) as exc:
        asyncio.run(OpenAIClient(RuntimeConfig(openai_api_key="sk-test")).complete(MESSAGES))
    assert exc.value.code == "EMPTY_RESPONSE"


@pytest.mark.parametrize(
    "status,error_cls",
    [(401, InvalidCredentialError), (429, RateLimitError), (500, TransportError)],
)
def test_http_errors(monkeypatch, status, error_cls):
    install_client(monkeypatch, Resp({"error": {}}, status_code=status, reason_phrase="Err"), {})
    with pytest.raises(error_cls) as exc:
        asyncio.run(OpenAIClient(RuntimeConfig(openai_api_key="sk-test")).complete(MESSAGES))
    assert isinstance(exc.value, TransportError)
    assert exc.value.status_code == status
    assert exc.value.status_text == "Err"


def test_network_error(monkeypatch):
    install_client(monkeypatch, httpx.ConnectTimeout("timed out"), {})
    with pytest.raises(TransportError) as exc:
        asyncio.run(OpenAIClient(RuntimeConfig(openai_api_key="sk-test")).complete(MESSAGES))
    assert exc.value.status_code == 0


def test_create_provider(monkeypatch):
    class DummySettings:
        default_model = "chat"
        completion_url = "https://proxy.local/v1/chat/completions"
        http_timeout = 3.0

    monkeypatch.setattr("mcp_chat_core.providers.settings", DummySettings())
    captured = {}
    install_client(monkeypatch, Resp({"choices": [{"message": {"content": "ok"}}]}), captured)
    provider = create_provider(RuntimeConfig(openai_api_key="sk-test"))
    assert isinstance(provider, OpenAIClient)
    assert asyncio.run(provider.complete(MESSAGES)) == "ok"
    assert captured["url"] == "https://proxy.local/v1/chat/completions"


class HtmlResp(Resp):
    def __init__(self):
        super().__init__(None, status_code=200, reason_phrase="OK")
        self.text = "<html><body>Bad Gateway</body></html>"

    def json(self):
        raise ValueError("Expecting value: line 1 column 1 (char 0)")


def test_non_json_success_body_maps_to_transport_error(monkeypatch):
    install_client(monkeypatch, HtmlResp(), {})
    with pytest.raises(TransportError) as exc:
        asyncio.run(OpenAIClient(RuntimeConfig(openai_api_key="sk-test")).complete(MESSAGES))
    assert exc.value.code == "TRANSPORT"
    assert exc.value.status_code == 200
    assert "Invalid JSON" in exc.value.message


@pytest.mark.parametrize(
    "data",
    [{"choices": ["x"]}, {"choices": [None]}, {"choices": "abc"}, ["not", "an", "object"]],
)
def test_malformed_choices_map_to_empty_response(monkeypatch, data):
    install_client(monkeypatch, Resp(data), {})
    with pytest.raises(EmptyResponseError):
        asyncio.run(OpenAIClient(RuntimeConfig(openai_api_key="sk-test")).complete(MESSAGES))


def test_choice_without_message_object_returns_empty_text(monkeypatch):
    install_client(monkeypatch, Resp({"choices": [{"message": "hi"}]}), {})
    assert asyncio.run(OpenAIClient(RuntimeConfig(openai_api_key="sk-test")).complete(MESSAGES)) == ""


def test_model_resolved_through_registry():
    with pytest.raises(KeyError) as exc:
        OpenAIClient(RuntimeConfig(openai_api_key="sk-test"), model="gpt-99")
    assert "gpt-99" in str(exc.value)


def test_create_provider_rejects_unknown_model(monkeypatch):
    class DummySettings:
        default_model = "no-such-model"
        completion_url = None
        http_timeout = 3.0

    monkeypatch.setattr("mcp_chat_core.providers.settings", DummySettings())
    with pytest.raises(KeyError):
        create_provider(RuntimeConfig(openai_api_key="sk-test"))
