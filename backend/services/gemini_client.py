"""Google Gemini adapters for the text, embedding and moderation ports."""

import json
import logging

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from config import Settings, settings as default_settings
from services.providers import (
    GenerationOptions,
    ModerationVerdict,
    ProviderUnavailableError,
    TextResponse,
    TransientProviderError,
    classify_status_code,
)

logger = logging.getLogger(__name__)

_clients: dict[str, genai.Client] = {}


def get_client(api_key: str | None = None) -> genai.Client | None:
    api_key = default_settings.gemini_api_key if api_key is None else api_key
    if not api_key:
        logger.warning("No GEMINI_API_KEY set - Gemini features disabled")
        return None
    if api_key not in _clients:
        _clients[api_key] = genai.Client(api_key=api_key)
    return _clients[api_key]


def _translate_error(e: genai_errors.APIError):
    return classify_status_code(getattr(e, "code", None), f"Gemini API error: {e}")


def parse_json_response(text: str) -> dict | None:
    """Parse model output as a JSON object, tolerating markdown code fences."""
    text = (text or "").strip()
    # Strip markdown code fences if present
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else text[3:]
        if text.endswith("```"):
            text = text[:-3]
        text = text.strip()

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        logger.error("Failed to parse Gemini response as JSON: %s", e)
        return None
    return parsed if isinstance(parsed, dict) else None


class GeminiTextProvider:
    """TextProvider backed by google-genai's async client."""

    def __init__(self, api_key: str, model: str = "gemini-2.5-flash"):
        self.api_key = api_key
        self.model = model

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        options: GenerationOptions,
    ) -> TextResponse:
        client = get_client(self.api_key)
        if client is None:
            raise ProviderUnavailableError("Gemini API key not configured")

        config = types.GenerateContentConfig(
            system_instruction=system_prompt or None,
            temperature=options.temperature,
            max_output_tokens=options.max_tokens,
            response_mime_type="application/json" if options.response_format == "json" else None,
        )
        try:
            response = await client.aio.models.generate_content(
                model=self.model,
                contents=user_prompt,
                config=config,
            )
        except genai_errors.APIError as e:
            logger.error("Gemini API error: %s", e)
            raise _translate_error(e) from e
        except (httpx.TransportError, OSError) as e:
            logger.error("Gemini transport error: %s", e)
            raise TransientProviderError(f"Gemini unreachable: {e}") from e

        usage = response.usage_metadata
        return TextResponse(
            text=(response.text or "").strip(),
            input_tokens=(usage.prompt_token_count or 0) if usage else 0,
            output_tokens=(usage.candidates_token_count or 0) if usage else 0,
            model=self.model,
        )


class GeminiEmbeddingProvider:
    """EmbeddingProvider backed by a Gemini embedding model."""

    def __init__(self, api_key: str, model: str = "text-embedding-004"):
        self.api_key = api_key
        self.model = model

    async def embed(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        client = get_client(self.api_key)
        if client is None:
            raise ProviderUnavailableError("Gemini API key not configured")
        try:
            result = await client.aio.models.embed_content(model=self.model, contents=texts)
        except genai_errors.APIError as e:
            logger.error("Gemini embedding error: %s", e)
            raise _translate_error(e) from e
        except (httpx.TransportError, OSError) as e:
            logger.error("Gemini embedding transport error: %s", e)
            raise TransientProviderError(f"Gemini unreachable: {e}") from e
        return [list(e.values or []) for e in (result.embeddings or [])]


MODERATION_CATEGORIES = [
    "hate",
    "hate/threatening",
    "harassment",
    "harassment/threatening",
    "self-harm",
    "self-harm/intent",
    "self-harm/instructions",
    "sexual",
    "sexual/minors",
    "violence",
    "violence/graphic",
]

_MODERATION_SYSTEM_PROMPT = f"""You are a content safety classifier. For the text you are given, decide for each of these categories whether the text contains such content: {", ".join(MODERATION_CATEGORIES)}.

Respond with ONLY valid JSON (no markdown, no code fences):
{{"flagged": <true|false>, "categories": {{"<category>": <true|false>, ...}}}}"""


class GeminiModerationProvider:
    """ModerationProvider that asks a Gemini model to classify the text."""

    def __init__(self, text_provider: GeminiTextProvider):
        self.text_provider = text_provider

    async def classify(self, text: str) -> ModerationVerdict:
        response = await self.text_provider.generate(
            _MODERATION_SYSTEM_PROMPT,
            text,
            GenerationOptions(temperature=0.0, max_tokens=512, response_format="json"),
        )
        data = parse_json_response(response.text)
        if data is None:
            raise ProviderUnavailableError("moderation classifier returned invalid JSON")
        raw = data.get("categories") if isinstance(data.get("categories"), dict) else {}
        categories = {c: bool(raw.get(c, False)) for c in MODERATION_CATEGORIES}
        return ModerationVerdict(
            flagged=bool(data.get("flagged")) or any(categories.values()),
            categories=categories,
        )


def build_text_provider(cfg: Settings) -> GeminiTextProvider | None:
    if not cfg.gemini_api_key:
        return None
    return GeminiTextProvider(cfg.gemini_api_key, cfg.gemini_model)


def build_embedding_provider(cfg: Settings):
    if cfg.embedding_backend == "local":
        from services.similarity import LocalEmbeddingProvider

        return LocalEmbeddingProvider(cfg.local_embedding_model)
    if not cfg.gemini_api_key:
        return None
    return GeminiEmbeddingProvider(cfg.gemini_api_key, cfg.embedding_model)


def build_moderation_provider(cfg: Settings) -> GeminiModerationProvider | None:
    text_provider = build_text_provider(cfg)
    if not cfg.moderation_enabled or text_provider is None:
        return None
    return GeminiModerationProvider(text_provider)
