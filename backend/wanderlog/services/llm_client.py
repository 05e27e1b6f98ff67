"""Unified LLM client over the Anthropic and OpenAI async SDKs.

One provider is selected per process. Each completion is exactly one
provider call: a failed generation is surfaced to the caller, never retried
or re-sent to another provider, since every attempt is billed.
"""

import json
import logging
import re
from typing import Any

import anthropic
from openai import AsyncOpenAI

from wanderlog.config import settings
from wanderlog.exceptions import ModelUnavailable

logger = logging.getLogger(__name__)

_FENCED_JSON = re.compile(r"```json[ \t]*\n(.*?)\s*```", re.DOTALL)
_FENCED_ANY = re.compile(r"```[^\n]*\n(.*?)\s*```", re.DOTALL)


def extract_json_payload(text: str) -> Any:
    """Parse JSON out of a model reply.

    Tries a ```json fenced block, then any fenced block, then the whole
    reply. Raises ValueError if none of them parse.
    """
    match = _FENCED_JSON.search(text) or _FENCED_ANY.search(text)
    candidate = match.group(1) if match else text
    return json.loads(candidate.strip())


class LLMClient:
    """Async LLM client with a single configured provider."""

    def __init__(
        self,
        provider: str | None = None,
        anthropic_api_key: str | None = None,
        openai_api_key: str | None = None,
    ):
        self._anthropic_key = settings.anthropic_api_key if anthropic_api_key is None else anthropic_api_key
        self._openai_key = settings.openai_api_key if openai_api_key is None else openai_api_key
        self.provider = self._select_provider(provider or settings.llm_provider)
        self._anthropic = None
        self._openai = None

        if self.provider == "anthropic" and self._anthropic_key:
            self._anthropic = anthropic.AsyncAnthropic(
                api_key=self._anthropic_key, timeout=settings.llm_timeout_seconds
            )
        elif self.provider == "openai" and self._openai_key:
            self._openai = AsyncOpenAI(api_key=self._openai_key, timeout=settings.llm_timeout_seconds)

        if not self.is_configured:
            logger.warning(f"No API key for LLM provider '{self.provider}', AI features are disabled")

    def _select_provider(self, requested: str) -> str:
        if requested in ("anthropic", "openai"):
            return requested
        if self._anthropic_key:
            return "anthropic"
        if self._openai_key:
            return "openai"
        return "anthropic"

    @property
    def is_configured(self) -> bool:
        return self._anthropic is not None or self._openai is not None

    @property
    def model(self) -> str:
        return settings.anthropic_model if self.provider == "anthropic" else settings.openai_model

    async def complete(
        self,
        system: str,
        user: str,
        *,
        max_tokens: int = 1000,
        temperature: float = 0,
    ) -> str:
        """Get a completion from the configured LLM.

        Args:
            system: System prompt
            user: User message
            max_tokens: Max output tokens
            temperature: Sampling temperature

        Returns:
            Raw text response from the LLM.

        Raises:
            ModelUnavailable if no provider is configured or the call fails.
        """
        if not self.is_configured:
            raise ModelUnavailable(
                "AI features are not configured",
                f"Set the API key for the '{self.provider}' provider",
            )

        try:
            if self._anthropic is not None:
                response = await self._anthropic.messages.create(
                    model=self.model,
                    max_tokens=max_tokens,
                    temperature=temperature,
                    system=system,
                    messages=[{"role": "user", "content": user}],
                )
                text = "".join(
                    block.text for block in response.content if getattr(block, "type", None) == "text"
                )
            else:
                response = await self._openai.chat.completions.create(
                    model=self.model,
                    max_tokens=max_tokens,
                    temperature=temperature,
                    messages=[
                        {"role": "system", "content": system},
                        {"role": "user", "content": user},
                    ],
                )
                text = response.choices[0].message.content or ""
        except Exception as e:
            logger.error(f"{self.provider} completion failed: {e}")
            raise ModelUnavailable("Language model request failed", str(e)) from e

        if not text.strip():
            raise ModelUnavailable("Language model returned an empty response")
        return text.strip()

    async def close(self):
        if self._anthropic is not None:
            await self._anthropic.close()
        if self._openai is not None:
            await self._openai.close()


# Singleton
llm_client = LLMClient()
