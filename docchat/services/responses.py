"""Reply generation for document chats."""

from __future__ import annotations

import logging
from typing import Callable, Dict, List

from ..config import Settings
from ..observability import metrics_registry
from .openrouter_client import chat as openrouter_chat

LOGGER = logging.getLogger(__name__)

Transport = Callable[[List[Dict[str, str]]], str]

DOCUMENT_SYSTEM_PROMPT = (
    "You are a helpful AI assistant that answers questions about PDF documents. "
    "Answer based on the following document content:\n\n"
    "Document content:\n{context}"
)
GENERAL_SYSTEM_PROMPT = (
    "You are a helpful AI assistant. The system attempted to analyze a PDF but "
    "couldn't extract meaningful text. Please help the user with their question "
    "based on your general knowledge."
)
EMPTY_REPLY = "I'm sorry, I couldn't generate a response at this time."
ERROR_REPLY = "I encountered an error while processing your request. Please try again."

# Phrases that only appear in extraction fallback texts.
FALLBACK_MARKERS = ("Text extraction failed", "Unable to read file content")


class ResponseGenerator:
    """Turn a user prompt plus optional document text into a reply.

    ``generate`` never raises: transport failures become :data:`ERROR_REPLY`.
    """

    def __init__(self, settings: Settings, *, transport: Transport | None = None) -> None:
        self._settings = settings
        self._transport = transport or self._openrouter_transport

    def _openrouter_transport(self, messages: List[Dict[str, str]]) -> str:
        settings = self._settings
        return openrouter_chat(
            messages,
            url=settings.openrouter_url,
            api_key=settings.openrouter_api_key,
            model=settings.openrouter_model,
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
            site_url=settings.openrouter_site_url,
            title=settings.openrouter_title,
            timeout_read=settings.llm_timeout_s,
        )

    def has_valid_context(self, context: str | None) -> bool:
        if not context or len(context) <= self._settings.context_min_chars:
            return False
        return not any(marker in context for marker in FALLBACK_MARKERS)

    def build_messages(self, prompt: str, context: str | None) -> List[Dict[str, str]]:
        if self.has_valid_context(context):
            system = DOCUMENT_SYSTEM_PROMPT.format(
                context=context[: self._settings.context_max_chars]  # type: ignore[index]
            )
        else:
            system = GENERAL_SYSTEM_PROMPT
        return [
            {"role": "system", "content": system},
            {"role": "user", "content": prompt},
        ]

    def generate(self, prompt: str, context: str | None = None) -> str:
        messages = self.build_messages(prompt, context)
        LOGGER.info(
            "Generating reply (context=%d chars, usable=%s)",
            len(context or ""),
            self.has_valid_context(context),
        )
        try:
            reply = self._transport(messages)
        except Exception:  # noqa: BLE001 - every failure becomes an apology reply
            LOGGER.exception("Reply generation failed")
            metrics_registry.record_event("reply_fallbacks")
            return ERROR_REPLY
        if not reply or not reply.strip():
            metrics_registry.record_event("reply_fallbacks")
            return EMPTY_REPLY
        return reply


__all__ = [
    "DOCUMENT_SYSTEM_PROMPT",
    "EMPTY_REPLY",
    "ERROR_REPLY",
    "FALLBACK_MARKERS",
    "GENERAL_SYSTEM_PROMPT",
    "ResponseGenerator",
    "Transport",
]
