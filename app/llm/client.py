"""
LLM Client
==========
Asynchronous client for the generative repair call.

Retry Policy:
    - LLM_MAX_RETRIES attempts per call (default: 3)
    - Linear backoff between attempts: LLM_RETRY_DELAY * attempt seconds
    - Retries on: HTTP error, timeout, malformed or empty response
    - Exhaustion raises LLMUnavailableError; the repair selector treats
      that as "generative repair unavailable for this diagnostic" and
      falls back to the rule table

Availability:
    ``is_enabled`` is False when no provider key is configured. Callers
    check it before calling ``generate``.
"""
import asyncio
import logging
from typing import Optional

import httpx

from app.core import config
from app.core.errors import LLMUnavailableError
from app.llm.router import ProviderConfig, select_provider

logger = logging.getLogger(__name__)

_UNSET = object()


class LLMClient:
    """
    Async HTTP client for an OpenAI-compatible chat completion endpoint.

    Usage:
        client = LLMClient()
        if client.is_enabled:
            text = await client.generate("Fix this file...")
        await client.close()
    """

    def __init__(
        self,
        provider=_UNSET,
        max_retries: int = config.LLM_MAX_RETRIES,
        retry_delay: float = config.LLM_RETRY_DELAY,
        temperature: float = config.LLM_TEMPERATURE,
        max_tokens: int = config.LLM_MAX_TOKENS,
        timeout_seconds: float = config.LLM_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.provider: Optional[ProviderConfig] = (
            select_provider() if provider is _UNSET else provider
        )
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout_seconds = timeout_seconds
        self._transport = transport
        self._http: Optional[httpx.AsyncClient] = None

    @property
    def is_enabled(self) -> bool:
        return self.provider is not None

    async def _get_http(self) -> httpx.AsyncClient:
        """Lazy-initialise the HTTP client."""
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout_seconds),
                transport=self._transport,
            )
        return self._http

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._http and not self._http.is_closed:
            await self._http.aclose()
            self._http = None

    async def generate(self, prompt: str) -> str:
        """
        Send ``prompt`` and return the raw completion text.

        Raises
        ------
        LLMUnavailableError
            No provider configured, or every attempt failed.
        """
        if self.provider is None:
            raise LLMUnavailableError("No LLM provider configured")

        last_error = "unknown error"
        for attempt in range(1, self.max_retries + 1):
            try:
                logger.debug(
                    "Calling %s (attempt %d/%d)", self.provider.name, attempt, self.max_retries
                )
                text = await self._call_chat_completion(prompt)
                if text and text.strip():
                    return text
                last_error = "empty response"
                logger.warning("Provider %s attempt %d: empty response", self.provider.name, attempt)

            except httpx.TimeoutException:
                last_error = "timeout"
                logger.warning("Provider %s attempt %d: timeout", self.provider.name, attempt)
            except httpx.HTTPStatusError as e:
                last_error = f"HTTP {e.response.status_code}"
                logger.warning(
                    "Provider %s attempt %d: HTTP %d",
                    self.provider.name, attempt, e.response.status_code,
                )
            except (httpx.HTTPError, ValueError, KeyError, IndexError, TypeError) as e:
                last_error = str(e) or type(e).__name__
                logger.warning("Provider %s attempt %d: %s", self.provider.name, attempt, e)

            if attempt < self.max_retries:
                await asyncio.sleep(self.retry_delay * attempt)

        raise LLMUnavailableError(
            f"{self.provider.name} failed after {self.max_retries} attempts: {last_error}"
        )

    async def _call_chat_completion(self, prompt: str) -> str:
        """Call an OpenAI-compatible /chat/completions endpoint."""
        http = await self._get_http()
        url = f"{self.provider.base_url}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self.provider.api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": self.provider.model,
            "messages": [
                {"role": "user", "content": prompt},
            ],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
        resp = await http.post(url, json=payload, headers=headers)
        resp.raise_for_status()
        data = resp.json()
        return data["choices"][0]["message"]["content"]
