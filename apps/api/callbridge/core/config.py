"""Application configuration for the booking call bridge."""
from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEVELOPMENT_ENVS = frozenset({"development", "dev", "local"})


class Settings(BaseSettings):
    """Runtime configuration, read once at startup."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore", frozen=True)

    app_env: str = Field(default="production", validation_alias=AliasChoices("app_env", "node_env"))
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000)
    log_level: str = Field(default="INFO")
    cors_allow_origins: Annotated[list[str], NoDecode] = Field(default_factory=lambda: ["*"])

    stream_api_key: str = Field(default="")
    stream_api_secret: str = Field(default="")
    stream_call_type: str = Field(default="default")
    stream_timeout_seconds: float = Field(default=6.0, gt=0)

    token_ttl_seconds: int = Field(default=3600, ge=1)
    hard_end_calls: bool = Field(default=False)

    @field_validator("cors_allow_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: object) -> object:
        """Allow comma-separated env values for CORS origins."""

        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @property
    def is_development(self) -> bool:
        return self.app_env.strip().lower() in DEVELOPMENT_ENVS

    @property
    def has_stream_credentials(self) -> bool:
        return bool(self.stream_api_key.strip() and self.stream_api_secret.strip())


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()

