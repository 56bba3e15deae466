from __future__ import annotations
from abc import ABC, abstractmethod
import anthropic

_QUOTA_MARKERS = ("429", "rate limit", "rate_limit", "quota")


class BackendError(Exception):
    pass


class QuotaExceededError(BackendError):
    pass


def is_quota_error(exc: BaseException) -> bool:
    """True when an error from any backend signals a rate or quota limit."""
    if isinstance(exc, (QuotaExceededError, anthropic.RateLimitError)):
        return True
    if getattr(exc, "status_code", None) == 429:
        return True
    message = str(exc).lower()
    return any(marker in message for marker in _QUOTA_MARKERS)


class TextBackend(ABC):
    """Sends fixed instructions plus user text to a text-generation service."""

    @abstractmethod
    async def complete(self, instructions: str, user_content: str) -> str:
        ...


class AnthropicBackend(TextBackend):
    def __init__(
        self,
        api_key: str,
        model: str,
        max_tokens: int = 2048,
        temperature: float = 0.1,
    ) -> None:
        self._client = anthropic.AsyncAnthropic(api_key=api_key, max_retries=0)
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature

    async def complete(self, instructions: str, user_content: str) -> str:
        try:
            response = await self._client.messages.create(
                model=self._model,
                max_tokens=self._max_tokens,
                temperature=self._temperature,
                system=instructions + "\n\nIMPORTANT: Return ONLY valid JSON, no other text.",
                messages=[{"role": "user", "content": user_content}],
            )
        except anthropic.RateLimitError as e:
            raise QuotaExceededError(f"Rate limit reached (429): {e}") from e
        except anthropic.APIError as e:
            raise BackendError(f"Text backend request failed: {e}") from e

        if not response.content:
            raise BackendError("Empty response from text backend")
        return response.content[0].text
