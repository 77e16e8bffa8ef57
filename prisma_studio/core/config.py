"""
PRISMA Studio Configuration Module
Loads and validates environment variables using Pydantic Settings.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import AliasChoices, Field, field_validator
from typing import Literal, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Gemini
    gemini_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("gemini_api_key", "api_key"),
        description="Gemini API key (GEMINI_API_KEY or API_KEY)",
    )
    text_model: str = Field("gemini-3-flash-preview", description="Default text generation model")
    image_model: str = Field("gemini-2.5-flash-image", description="Default image generation model")
    speech_model: str = Field("gemini-2.5-flash-preview-tts", description="Text-to-speech model")
    key_validation_url: str = Field(
        "https://generativelanguage.googleapis.com/v1/models",
        description="Endpoint probed when validating an API key",
    )

    # Package generation
    package_max_output_tokens: int = Field(8192, ge=256, description="Output token ceiling for package generation")
    package_temperature: float = Field(0.7, ge=0.0, le=2.0)
    script_prompt_chars: int = Field(1500, ge=1, description="Script characters forwarded to the model")
    narrative_prompt_chars: int = Field(2000, ge=1, description="Narrative characters forwarded for voiceover packs")

    # Rate limit retries
    package_rate_limit_retries: int = Field(5, ge=0)
    image_rate_limit_retries: int = Field(3, ge=0)
    backoff_base_seconds: float = Field(2.0, ge=0.0)
    backoff_jitter_seconds: float = Field(1.0, ge=0.0)

    @field_validator("gemini_api_key")
    @classmethod
    def strip_api_key(cls, v: str) -> str:
        return (v or "").strip()


# Singleton instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create settings singleton."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
