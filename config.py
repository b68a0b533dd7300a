from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # API Keys
    GEMINI_API_KEY: Optional[str] = None  # Checked on every request, not at startup

    # Gemini OpenAI-compatible endpoint
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta/openai"
    GEMINI_MODEL: str = "gemini-2.0-flash-exp"

    # Generation
    TEMPERATURE: float = 0.7
    MAX_TOKENS: int = 1500
    REQUEST_TIMEOUT: Optional[float] = None  # None = wait for the provider forever

    # Server Config
    PORT: int = 8000

    # Pydantic configuration to read from .env file
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


settings = Settings()
