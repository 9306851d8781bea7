"""Ports for the external AI services and the errors they may raise.

Every adapter (Gemini, sentence-transformers, test fakes) implements one of
these protocols. The error classes let callers tell a provider that is
temporarily unusable (retry or fall back) from a request the provider
rejected outright (propagate).
"""

from dataclasses import dataclass, field
from typing import Protocol


class ProviderError(Exception):
    """Base class for failures reported by an AI provider."""


class ProviderUnavailableError(ProviderError):
    """Provider is unconfigured, out of quota, or otherwise unusable."""


class TransientProviderError(ProviderUnavailableError):
    """Temporary failure (rate limit, 5xx) that is worth retrying."""


class ProviderTimeoutError(TransientProviderError):
    """Provider did not answer within the configured timeout."""


class ProviderBadRequestError(ProviderError):
    """Provider rejected the request (bad input, auth, permission)."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class GenerationOptions:
    temperature: float = 0.7
    max_tokens: int = 1000
    response_format: str = "text"  # "text" | "json"


@dataclass
class TextResponse:
    text: str
    input_tokens: int = 0
    output_tokens: int = 0
    model: str = ""


@dataclass
class ModerationVerdict:
    flagged: bool = False
    categories: dict[str, bool] = field(default_factory=dict)


class TextProvider(Protocol):
    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        options: GenerationOptions,
    ) -> TextResponse:
        """Return the model's completion for the given prompts."""


class EmbeddingProvider(Protocol):
    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Return one vector per input text, in input order."""


class ModerationProvider(Protocol):
    async def classify(self, text: str) -> ModerationVerdict:
        """Return whether text falls into a harmful category."""


def classify_status_code(status_code: int | None, message: str) -> ProviderError:
    """Map an HTTP-ish status code from a provider SDK to our error taxonomy."""
    if status_code in (400, 401, 403, 404):
        return ProviderBadRequestError(message, status_code=status_code)
    if status_code == 429 or (status_code is not None and status_code >= 500):
        return TransientProviderError(message)
    return ProviderUnavailableError(message)
