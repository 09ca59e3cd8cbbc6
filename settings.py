# settings.py
from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Literal


DEV_JWT_SECRET = "dev-secret-change-me"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    ENV: Literal["dev", "staging", "prod"] = "dev"

    # -----------------------
    # Store
    # -----------------------
    STORE_BACKEND: Literal["memory", "postgres"] = "memory"
    DATABASE_URL: str = Field(default="")
    DB_POOL_MIN: int = Field(default=1, ge=1)
    DB_POOL_MAX: int = Field(default=10, ge=1)
    DB_STATEMENT_TIMEOUT_MS: int = Field(default=5000, ge=100)
    # memory store only: load the demo customers/orders on startup
    SEED_DEMO_DATA: bool = True

    # -----------------------
    # JWT (verification only; tokens are minted by the identity provider)
    # -----------------------
    JWT_SECRET: str = Field(default=DEV_JWT_SECRET, min_length=16)
    JWT_ALG: str = Field(default="HS256")

    # -----------------------
    # Fees (IDR per liter)
    # -----------------------
    COURIER_FEE_PER_LITER: int = Field(default=500, ge=0)
    AFFILIATE_FEE_PER_LITER: int = Field(default=200, ge=0)

    # -----------------------
    # Notifications
    # -----------------------
    NOTIFY_WEBHOOK_URL: str = ""
    NOTIFY_HTTP_TIMEOUT_S: float = 5.0


settings = Settings()


def validate_env_settings() -> None:
    """
    Fail fast outside dev. Collects every problem so one deploy shows them all.
    """
    if settings.ENV == "dev":
        return

    missing: list[str] = []
    if not settings.JWT_SECRET or settings.JWT_SECRET == DEV_JWT_SECRET:
        missing.append("JWT_SECRET")
    if settings.STORE_BACKEND == "postgres" and not (settings.DATABASE_URL or "").strip():
        missing.append("DATABASE_URL")
    if settings.STORE_BACKEND == "memory" and settings.ENV == "prod":
        missing.append("STORE_BACKEND")

    if missing:
        raise RuntimeError(f"Missing or unsafe settings for ENV={settings.ENV}: {', '.join(missing)}")
