"""FileDeck configuration — Pydantic BaseSettings loaded from .env."""

from __future__ import annotations

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    app_name: str = "FileDeck"
    debug: bool = True
    environment: str = "development"
    log_level: str = "INFO"

    # Network
    host: str = "127.0.0.1"
    port: int = 8000
    api_prefix: str = "/api"
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:8000",
    ]

    # Device command bridge
    device_bridge_url: str = "http://127.0.0.1:8765"
    device_id: str = ""  # Serial of the device selected at startup
    request_timeout_seconds: float = 30.0

    # Browser
    initial_path: str = "/sdcard/"
    show_hidden_default: bool = True
    preview_max_bytes: int = 1024 * 1024  # 1 MiB

    # Transfers — 0 means unbounded (every transfer starts immediately)
    max_concurrent_transfers: int = 0

    # Mode: dev = in-memory device, prod = HTTP bridge
    mode: str = "dev"

    @property
    def is_dev_mode(self) -> bool:
        return self.mode == "dev"

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),
        env_file_encoding="utf-8",
        env_prefix="FILEDECK_",
        extra="ignore",
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def assemble_cors_origins(cls, value: list[str] | str) -> list[str]:
        if isinstance(value, str) and not value.startswith("["):
            return [o.strip() for o in value.split(",") if o.strip()]
        if isinstance(value, list):
            return value
        return ["http://localhost:5173"]

    @field_validator("initial_path")
    @classmethod
    def _directory_path(cls, value: str) -> str:
        """Directory paths always end in a slash."""
        value = value.strip() or "/"
        return value if value.endswith("/") else value + "/"

    @field_validator("max_concurrent_transfers")
    @classmethod
    def _non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("max_concurrent_transfers must be >= 0")
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
