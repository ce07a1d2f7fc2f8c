"""Async client for OpenAI-compatible chat-completion endpoints (Groq by default)."""

from __future__ import annotations

import json as _json
import logging
from typing import Any, Protocol

import httpx

logger = logging.getLogger(__name__)


DEFAULT_BASE_URL = "https://api.groq.com/openai/v1"
DEFAULT_MODEL = "llama-3.3-70b-versatile"


class LLMClientError(Exception):
    """Raised when a reply could not be generated."""


class ReplyGenerator(Protocol):
    """Anything that turns a system prompt and chat messages into a reply."""

    async def generate(self, system_prompt: str, messages: list[dict[str, str]]) -> str:
        ...


class ChatCompletionClient:
    """Generates character replies through a /chat/completions endpoint."""

    def __init__(
        self,
        base_url: str | None = None,
        model: str | None = None,
        api_key: str | None = None,
        timeout: float = 15.0,
        max_tokens: int = 200,
        temperature: float = 0.8,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or DEFAULT_BASE_URL).strip().rstrip("/")
        self.model = model or DEFAULT_MODEL
        self.max_tokens = max_tokens
        self.temperature = temperature
        headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}
        self.client = httpx.AsyncClient(timeout=timeout, headers=headers, transport=transport)

    # ------------------------------------------------------------------
    # Cleanup
    # ------------------------------------------------------------------

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    async def generate(self, system_prompt: str, messages: list[dict[str, str]]) -> str:
        """Return the reply text; raise LLMClientError on any failure."""
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": [{"role": "system", "content": system_prompt}, *messages],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }

        try:
            response = await self.client.post(f"{self.base_url}/chat/completions", json=payload)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            logger.error("LLM request timed out (model=%s): %s", self.model, exc)
            raise LLMClientError("LLM request timed out") from exc
        except httpx.HTTPStatusError as exc:
            logger.error(
                "LLM endpoint returned HTTP %d: %s",
                exc.response.status_code,
                exc.response.text[:500],
            )
            raise LLMClientError(f"LLM HTTP error {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            logger.error("LLM network error at %s: %s", self.base_url, exc)
            raise LLMClientError(f"LLM network error: {exc}") from exc

        try:
            body = response.json()
            content = body["choices"][0]["message"]["content"]
        except (_json.JSONDecodeError, KeyError, IndexError, TypeError) as exc:
            logger.error("Unexpected LLM response body: %s", response.text[:500])
            raise LLMClientError("LLM returned an unexpected response") from exc

        if not isinstance(content, str) or not content.strip():
            raise LLMClientError("LLM returned an empty reply")
        return content.strip()
