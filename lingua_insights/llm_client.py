"""
Minimal LLM client for an OpenAI-compatible chat-completions gateway.

Rationale:
- Plain httpx against `{base_url}/chat/completions` (OpenRouter by default).
- Keep interface tiny: complete(prompt) -> str.
- The gateway reply is classified into a small tagged result before any
  field is trusted.
- No retries / no fallback / no streaming.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

import httpx

from .config import Settings
from .errors import GatewayError, MalformedResponseError, MissingCredentialError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Completion:
    text: str


@dataclass(frozen=True)
class Malformed:
    detail: str


@dataclass(frozen=True)
class ProviderError:
    message: str
    status_code: Optional[int] = None


GatewayReply = Union[Completion, Malformed, ProviderError]


def _error_message(body: Any) -> Optional[str]:
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        message = body["error"].get("message")
        if message:
            return str(message)
    return None


def parse_gateway_reply(status_code: int, reason: str, body: Any) -> GatewayReply:
    """
    Classify a decoded gateway response.

    `body` is the decoded JSON, or None when the body was not JSON.
    """
    if not 200 <= status_code < 300:
        return ProviderError(_error_message(body) or reason or f"HTTP {status_code}", status_code)

    if not isinstance(body, dict):
        return Malformed("response body is not a JSON object")

    choices = body.get("choices")
    if not choices:
        message = _error_message(body)
        if message:
            return ProviderError(message, status_code)
        return Malformed("response has no choices")

    first = choices[0] if isinstance(choices, list) else None
    message = first.get("message") if isinstance(first, dict) else None
    content = message.get("content") if isinstance(message, dict) else None
    if not isinstance(content, str):
        return Malformed("choices[0].message.content is missing")
    if not content.strip():
        return Malformed("completion text is empty")
    return Completion(content)


class AiClient:
    """One chat-completion request per call to `complete`."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self._transport = transport

    @property
    def endpoint(self) -> str:
        return f"{self.settings.base_url.rstrip('/')}/chat/completions"

    async def complete(self, prompt: str, model: Optional[str] = None) -> str:
        if not self.settings.api_key:
            raise MissingCredentialError()

        model = model or self.settings.model
        payload = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": self.settings.max_tokens,
        }
        headers = {
            "Authorization": f"Bearer {self.settings.api_key}",
            "Content-Type": "application/json",
        }

        logger.info(f"Calling AI gateway with model {model} ({len(prompt)} prompt chars)")
        try:
            async with httpx.AsyncClient(
                timeout=self.settings.request_timeout, transport=self._transport
            ) as client:
                response = await client.post(self.endpoint, headers=headers, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Error calling AI gateway: {type(e).__name__}: {e}")
            raise GatewayError(f"Failed to communicate with AI service. {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = None

        reply = parse_gateway_reply(response.status_code, response.reason_phrase, body)
        if isinstance(reply, ProviderError):
            logger.error(f"AI gateway returned {response.status_code}: {reply.message}")
            raise GatewayError(f"AI gateway error: {reply.message}", reply.status_code)
        if isinstance(reply, Malformed):
            logger.error(f"Malformed AI gateway response: {reply.detail}")
            raise MalformedResponseError(f"Unexpected response from AI service: {reply.detail}")

        logger.debug(f"AI gateway returned {len(reply.text)} chars")
        return reply.text
