"""Unit tests for the OpenRouter client."""

from __future__ import annotations

import json
from types import SimpleNamespace

import pytest

from docchat.services import openrouter_client
from docchat.services.openrouter_client import OpenRouterError, chat

URL = "https://openrouter.test/api/v1/chat/completions"
MESSAGES = [{"role": "user", "content": "ping"}]


class _Response:
    def __init__(self, status_code: int = 200, body=None, text: str | None = None):
        self.status_code = status_code
        self.reason = "OK" if status_code == 200 else "Bad Request"
        self._body = body
        self.text = text if text is not None else json.dumps(body)

    def json(self):
        if self._body is None:
            raise json.JSONDecodeError("Expecting value", self.text, 0)
        return self._body


@pytest.fixture()
def captured(monkeypatch):
    calls = []
    state = SimpleNamespace(calls=calls, response=None)

    def _post(url, headers, json, timeout):
        calls.append({"url": url, "headers": headers, "json": json, "timeout": timeout})
        return state.response

    monkeypatch.setattr(openrouter_client.requests, "post", _post)
    return state


def test_chat_returns_first_choice(captured) -> None:
    captured.response = _Response(body={"choices": [{"message": {"content": "pong"}}]})

    content = chat(
        MESSAGES,
        url=URL,
        api_key="sk-test",
        model="test/model",
        max_tokens=1024,
        site_url="http://localhost:8000",
        title="DocChat",
        timeout_read=30,
    )

    assert content == "pong"
    call = captured.calls[0]
    assert call["url"] == URL
    assert call["headers"]["Authorization"] == "Bearer sk-test"
    assert call["headers"]["X-Title"] == "DocChat"
    assert call["json"] == {
        "model": "test/model",
        "messages": MESSAGES,
        "temperature": 0.2,
        "max_tokens": 1024,
    }
    assert call["timeout"] == (10, 30)


def test_chat_raises_on_http_error(captured) -> None:
    captured.response = _Response(status_code=400, text="bad model")

    with pytest.raises(OpenRouterError) as excinfo:
        chat(MESSAGES, url=URL, api_key="sk-test", model="m")

    assert excinfo.value.status_code == 400


@pytest.mark.parametrize(
    "response",
    [_Response(text="<html>"), _Response(body={"choices": []})],
)
def test_chat_raises_on_unusable_body(captured, response) -> None:
    captured.response = response

    with pytest.raises(OpenRouterError):
        chat(MESSAGES, url=URL, api_key="sk-test", model="m")


def test_chat_requires_api_key_before_sending(captured) -> None:
    with pytest.raises(OpenRouterError, match="OPENROUTER_API_KEY"):
        chat(MESSAGES, url=URL, api_key="  ", model="m")

    assert captured.calls == []


def test_chat_rejects_non_http_url(captured) -> None:
    with pytest.raises(OpenRouterError, match="Invalid OPENROUTER_URL"):
        chat(MESSAGES, url="ftp://example", api_key="sk-test", model="m")
