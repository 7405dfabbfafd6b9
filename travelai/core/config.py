from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    project_name: str = "TravelAI API"
    api_v1_prefix: str = "/api/v1"
    log_level: str = "INFO"

    gemini_api_key: str = Field(default="", description="Google Gemini API key")
    gemini_model: str = "gemini-2.0-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_timeout_seconds: float = 120.0
    gemini_temperature: float = 0.7
    gemini_top_k: int = 40
    gemini_top_p: float = 0.95
    gemini_max_output_tokens: int = 8192

    # 1 means a single attempt, no retries
    generation_max_attempts: int = Field(default=1, ge=1)
    generation_retry_backoff_seconds: float = 1.0

    supabase_url: str | None = None
    supabase_anon_key: str | None = None
    supabase_service_role_key: str | None = None

    use_supabase: bool = False
    itineraries_table: str = "itineraries"
    storage_max_attempts: int = Field(default=1, ge=1)

    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[arg-type]
