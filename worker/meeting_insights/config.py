from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Values may be provided via environment variables (prefix INSIGHTS_). The
    parsing core itself takes no configuration; these only shape the HTTP
    adapter.
    """

    model_config = SettingsConfigDict(env_prefix="INSIGHTS_", case_sensitive=False)

    # HTTP
    cors_allow_origins: str = Field("*", description="Comma-separated origins")
    max_payload_bytes: int = Field(2_000_000, description="Larger request bodies are rejected with 413")

    # Display
    summary_placeholder: str = Field("No summary available", description="Preview text for meetings without a summary")


def load_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
