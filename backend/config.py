import os
from pydantic_settings import BaseSettings


def _parse_cors_origins() -> list[str] | None:
    """Parse CORS_ORIGINS env var as comma-separated string or JSON list."""
    raw = os.environ.get("CORS_ORIGINS")
    if not raw:
        return None
    if raw.startswith("["):
        import json
        return json.loads(raw)
    return [o.strip() for o in raw.split(",") if o.strip()]


class Settings(BaseSettings):
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]
    debug: bool = False
    log_level: str = "INFO"

    # Embeddings: "gemini" uses the hosted embedding model, "local" loads
    # a sentence-transformers model on first use
    embedding_backend: str = "gemini"  # "gemini" | "local"
    embedding_model: str = "text-embedding-004"
    local_embedding_model: str = "all-MiniLM-L6-v2"
    embedding_timeout_seconds: float = 30.0
    relevance_chunk_size: int = 500

    # Cache. Empty redis_url keeps everything in-process.
    redis_url: str = ""
    analysis_cache_ttl_seconds: int = 7 * 24 * 3600
    cover_letter_cache_ttl_seconds: int = 24 * 3600
    memory_cache_max_entries: int = 1000

    # Analysis
    analysis_timeout_seconds: float = 120.0
    analysis_temperature: float = 0.3
    analysis_max_output_tokens: int = 4096
    max_resume_length: int = 50000
    max_job_description_length: int = 10000
    min_resume_length: int = 50
    task_retention_seconds: int = 3600
    max_tasks: int = 1000

    # Cover letters
    cover_letter_timeout_seconds: float = 60.0
    cover_letter_temperature: float = 0.7
    cover_letter_max_output_tokens: int = 1000
    cover_letter_max_retries: int = 3
    cover_letter_retry_delay_seconds: float = 5.0
    cover_letter_max_resume_length: int = 10000
    cover_letter_max_job_description_length: int = 5000
    cover_letter_min_input_length: int = 50
    cover_letter_min_content_length: int = 100
    max_prompt_tokens: int = 128000
    estimated_output_tokens: int = 500

    # USD per million tokens
    input_cost_per_million: float = 0.15
    output_cost_per_million: float = 0.60

    # Post-generation checks
    moderation_enabled: bool = True
    moderation_timeout_seconds: float = 15.0

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "protected_namespaces": ("settings_",)}


_cors_override = _parse_cors_origins()
settings = Settings(**{"cors_origins": _cors_override} if _cors_override else {})
