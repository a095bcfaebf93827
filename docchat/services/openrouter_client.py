"""Synchronous OpenRouter chat client."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Mapping

import requests

log = logging.getLogger("openrouter")


class OpenRouterError(RuntimeError):
    """Raised when the OpenRouter API request fails."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _build_headers(
    api_key: str | None, *, site_url: str | None, title: str | None
) -> Dict[str, str]:
    token = (api_key or "").strip()
    if not token:
        raise OpenRouterError("Missing OPENROUTER_API_KEY")
    if not token.lower().startswith("bearer "):
        token = f"Bearer {token}"

    headers: Dict[str, str] = {
        "Content-Type": "application/json",
        "Authorization": token,
    }
    if site_url and site_url.strip():
        headers["HTTP-Referer"] = site_url.strip()
        headers["Referer"] = site_url.strip()
    if title and title.strip():
        headers["X-Title"] = title.strip()
    return headers


def _build_payload(
    messages: List[Dict[str, str]],
    model: str,
    temperature: float,
    max_tokens: int | None,
    params: Mapping[str, Any] | None,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "model": model,
        "messages": messages,
        "temperature": temperature,
    }
    if max_tokens is not None:
        payload["max_tokens"] = int(max_tokens)
    for key, value in (params or {}).items():
        if value is not None:
            payload[key] = value
    return payload


def chat(
    messages: List[Dict[str, str]],
    *,
    url: str,
    api_key: str | None,
    model: str,
    temperature: float = 0.2,
    max_tokens: int | None = None,
    params: Mapping[str, Any] | None = None,
    site_url: str | None = None,
    title: str | None = None,
    timeout_connect: int = 10,
    timeout_read: int = 120,
) -> str:
    """Send a chat completion request to OpenRouter and return the content."""

    if not url.startswith("http"):
        raise OpenRouterError(f"Invalid OPENROUTER_URL: {url!r}")

    request_headers = _build_headers(api_key, site_url=site_url, title=title)
    payload = _build_payload(messages, model, temperature, max_tokens, params)

    safe_headers = dict(request_headers)
    safe_headers["Authorization"] = "***REDACTED***"
    log.debug(
        "OpenRouter request prepared",
        extra={"openrouter": {"url": url, "headers": safe_headers, "model": model}},
    )

    try:
        response = requests.post(
            url,
            headers=request_headers,
            json=payload,
            timeout=(timeout_connect, timeout_read),
        )
    except requests.RequestException as exc:
        log.error("OpenRouter request failed: %s", exc)
        raise OpenRouterError("OpenRouter request failed") from exc

    if response.status_code != 200:
        log.error("OpenRouter error %s: %s", response.status_code, response.text[:500])
        raise OpenRouterError(
            f"{response.status_code} {response.reason}",
            status_code=response.status_code,
        )

    try:
        data = response.json()
    except (json.JSONDecodeError, ValueError) as exc:
        log.error("OpenRouter invalid JSON: %s", response.text[:500])
        raise OpenRouterError("Invalid JSON from OpenRouter") from exc

    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        log.error("OpenRouter bad shape: %s / %s", exc, data)
        raise OpenRouterError("No choices in OpenRouter response") from exc
    return content or ""


__all__ = ["chat", "OpenRouterError"]
