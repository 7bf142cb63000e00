import os
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings

from .errors import ConfigurationError


class Settings(BaseSettings):
    steam_api_key: str = Field(..., alias="STEAM_API_KEY")
    turnstile_secret_key: Optional[str] = Field(None, alias="TURNSTILE_SECRET_KEY")
    environment: str = Field("development", alias="STEAM_SYNC_ENV")
    host: str = Field("0.0.0.0", alias="HOST")
    port: int = Field(8787, alias="PORT")
    http_timeout_seconds: Optional[float] = Field(None, alias="STEAM_SYNC_HTTP_TIMEOUT")
    max_body_bytes: int = Field(1024 * 1024, alias="STEAM_SYNC_MAX_BODY_BYTES")
    cors_origins: str = Field("*", alias="STEAM_SYNC_CORS_ORIGINS")
    log_level: str = Field("INFO", alias="STEAM_SYNC_LOG_LEVEL")
    debug_http: bool = Field(False, alias="STEAM_SYNC_DEBUG_HTTP")

    class Config:
        env_file = os.getenv("ENV_FILE", ".env")
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"

    @field_validator("steam_api_key")
    @classmethod
    def _require_api_key(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("STEAM_API_KEY must not be empty")
        return value.strip()

    @field_validator("turnstile_secret_key")
    @classmethod
    def _blank_secret_is_missing(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip()

    @model_validator(mode="after")
    def _require_secret_in_production(self) -> "Settings":
        if self.is_production and not self.turnstile_secret_key:
            raise ValueError("TURNSTILE_SECRET_KEY is required when STEAM_SYNC_ENV=production")
        return self

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() == "production"

    @property
    def allowed_origins(self) -> List[str]:
        origins = [origin.strip() for origin in self.cors_origins.split(",")]
        return [origin for origin in origins if origin] or ["*"]


@lru_cache
def get_settings() -> Settings:
    try:
        return Settings()  # type: ignore[call-arg]
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid backend configuration: {exc}") from exc
