"""
Configuration system with environment-based settings.
Uses pydantic-settings for validation and type safety.
"""

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    APP_VERSION: str = "1.0.0"
    ENV: Literal["development", "staging", "production"] = "development"
    DEBUG: bool = False

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # CORS
    CORS_ORIGINS: Annotated[list[str], NoDecode] = ["*"]

    # Fetcher
    FETCH_TIMEOUT: float = Field(30.0, gt=0)
    FETCH_MAX_REDIRECTS: int = 10
    FETCH_USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36 PageAuditBot/1.0"
    )

    # LLM client (any OpenAI-compatible endpoint)
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_BASE_URL: str | None = None

    # Narrative generation
    NARRATIVE_ENABLED: bool = True
    NARRATIVE_TEMPERATURE: float = 0.6
    NARRATIVE_MAX_TOKENS: int = 1500

    # Grammar analysis (OPENAI_MODEL when GRAMMAR_MODEL is unset)
    GRAMMAR_ENABLED: bool = True
    GRAMMAR_MODEL: str | None = None
    GRAMMAR_TEMPERATURE: float = 0.1
    GRAMMAR_MAX_TOKENS: int = 800
    GRAMMAR_CHUNK_SIZE: int = Field(2000, gt=0)

    # Scoring thresholds
    TITLE_MAX_LENGTH: int = 60
    TITLE_OPTIMAL_MIN_LENGTH: int = 30
    META_DESCRIPTION_MAX_LENGTH: int = 160
    META_DESCRIPTION_OPTIMAL_MIN_LENGTH: int = 120
    MIN_WORD_COUNT: int = 300

    # Scoring penalties and weights (weights are points out of their sum)
    BASIC_ISSUE_PENALTY: int = 15
    TECHNICAL_ISSUE_PENALTY: int = 20
    WEIGHT_BASIC: float = 40.0
    WEIGHT_CONTENT_QUALITY: float = 20.0
    WEIGHT_READABILITY: float = 20.0

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: Literal["json", "console"] = "json"

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors(cls, v: str | list) -> list:
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @property
    def llm_configured(self) -> bool:
        return bool(self.OPENAI_API_KEY)

    @property
    def narrative_configured(self) -> bool:
        return self.NARRATIVE_ENABLED and self.llm_configured

    @property
    def grammar_configured(self) -> bool:
        return self.GRAMMAR_ENABLED and self.llm_configured


@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance - created once per process."""
    return Settings()
