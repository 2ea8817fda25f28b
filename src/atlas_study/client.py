"""Chat-completion client for the Groq (OpenAI-compatible) endpoint."""

from __future__ import annotations

import logging
from collections.abc import Sequence

import httpx

from .config import ServerConfig, get_config
from .errors import CompletionError, ErrorCategory
from .models.content import ChatMessage
from .types import Feature

logger = logging.getLogger(__name__)

# Analytical features run cooler than creative ones; chat is the most open.
FEATURE_TEMPERATURES: dict[str, float] = {
    "summary": 0.4,
    "topic_analysis": 0.4,
    "revision": 0.4,
    "quiz": 0.5,
    "flashcards": 0.5,
    "study_plan": 0.5,
    "chat": 0.6,
}


def temperature_for(feature: Feature) -> float:
    """Return the default sampling temperature for *feature*."""
    try:
        return FEATURE_TEMPERATURES[feature]
    except KeyError:
        raise ValueError(f"Unknown feature '{feature}'") from None


def _upstream_message(response: httpx.Response) -> str:
    """Pull ``error.message`` out of an error body, if there is one."""
    try:
        body = response.json()
    except ValueError:
        return "Unknown error"
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return body["error"].get("message") or "Unknown error"
    return "Unknown error"


class CompletionClient:
    """One-shot chat completions against a fixed model.

    Construction validates the API key, so a missing ``GROQ_API_KEY``
    surfaces at startup rather than inside a request. There are no
    retries: a failed call raises :class:`CompletionError` once.
    """

    def __init__(
        self,
        api_key: str,
        *,
        model: str,
        api_url: str,
        max_tokens: int = 4096,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not api_key:
            raise CompletionError(
                "GROQ_API_KEY is not configured.",
                category=ErrorCategory.API_KEY_MISSING,
            )
        self.model = model
        self.api_url = api_url
        self.max_tokens = max_tokens
        self._http = httpx.AsyncClient(
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=timeout,
            transport=transport,
        )
        logger.info("Created completion client for %s (key …%s)", model, api_key[-4:])

    @classmethod
    def from_config(
        cls,
        cfg: ServerConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> CompletionClient:
        return cls(
            cfg.require_completion_key(),
            model=cfg.groq_model,
            api_url=cfg.groq_api_url,
            max_tokens=cfg.max_output_tokens,
            timeout=cfg.completion_timeout_seconds,
            transport=transport,
        )

    async def complete(
        self,
        messages: Sequence[ChatMessage],
        *,
        temperature: float,
        max_tokens: int | None = None,
    ) -> str:
        """Send *messages* and return the first completion's text.

        Args:
            messages: Ordered system/history/user messages.
            temperature: Sampling temperature (see FEATURE_TEMPERATURES).
            max_tokens: Output cap; defaults to the configured 4096.

        Returns:
            The completion text verbatim, or ``""`` when the response has no
            choices. Judging that text is the normalizer's job.

        Raises:
            CompletionError: Non-2xx status or transport failure.
        """
        payload = {
            "model": self.model,
            "messages": [m.model_dump() for m in messages],
            "temperature": temperature,
            "max_tokens": max_tokens or self.max_tokens,
            "stream": False,
        }
        try:
            response = await self._http.post(self.api_url, json=payload)
        except httpx.TimeoutException as exc:
            raise CompletionError(
                f"Groq API request timed out: {exc}",
                category=ErrorCategory.NETWORK_ERROR,
            ) from exc
        except httpx.HTTPError as exc:
            raise CompletionError(
                f"Groq API request failed: {exc}",
                category=ErrorCategory.NETWORK_ERROR,
            ) from exc

        if not response.is_success:
            raise CompletionError(
                f"Groq API error: {response.status_code} — {_upstream_message(response)}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError:
            logger.warning("Completion response was not JSON; treating as empty")
            return ""
        choices = data.get("choices") if isinstance(data, dict) else None
        if not choices:
            return ""
        message = choices[0].get("message") or {}
        return message.get("content") or ""

    async def aclose(self) -> None:
        await self._http.aclose()


_client: CompletionClient | None = None


def get_completion_client() -> CompletionClient:
    """Return the process-wide completion client, creating it on first access."""
    global _client
    if _client is None:
        _client = CompletionClient.from_config(get_config())
    return _client


async def close_completion_client() -> bool:
    """Close the shared client. Returns True when one was open."""
    global _client
    if _client is None:
        return False
    await _client.aclose()
    _client = None
    return True
