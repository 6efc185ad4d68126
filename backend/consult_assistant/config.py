"""Application configuration via environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env")

    database_url: str = "sqlite+aiosqlite:///./consult_assistant.db"
    debug: bool = False

    # Google AI (embedding + generation share one key).
    # A blank key puts the assistant in its "unavailable" state.
    google_api_key: str = ""
    embedding_model: str = "gemini-embedding-001"
    embedding_dimensions: int = 768
    generation_model: str = "gemini-2.5-flash"
    generation_temperature: float = 0.7
    generation_max_output_tokens: int = 800
    request_timeout_seconds: float = 30.0

    # Retrieval / answering
    retrieval_top_k: int = 5
    max_context_chars: int = 6000
    index_concurrency: int = 4

    currency_symbol: str = "₹"
    support_email: str = "support@sa-privatelimited.com"


settings = Settings()
