# jobmatch/config.py

from __future__ import annotations
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional

class Settings(BaseSettings):
    # --- Core ---
    SECRET_KEY: str = Field("change-me", description="JWT signing key")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(60 * 24 * 7, ge=5)  # 7 days
    DEBUG: bool = True  # set False in prod
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = Field(default_factory=lambda: ["http://localhost:5173"])

    # --- Database ---
    DATABASE_URL: str = Field("sqlite:///./jobmatch.db")
    # Alembic reads DATABASE_URL from env directly.

    # --- Mail (disabled while EMAIL_USER is unset) ---
    EMAIL_HOST: str = "smtp.gmail.com"
    EMAIL_PORT: int = 587
    EMAIL_USER: Optional[str] = None
    EMAIL_PASSWORD: Optional[str] = None
    EMAIL_FROM: str = "JobMatch <no-reply@jobmatch.com>"

    # --- Uploads ---
    UPLOAD_DIR: str = "./uploads"
    UPLOAD_BASE_URL: str = "/uploads"
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024

    # --- Admin seeding ---
    ADMIN_EMAIL: str = "admin@jobmatch.com"
    ADMIN_PASSWORD: str = "admin123456"

    # Reject status moves outside the review pipeline table.
    # False restores the old behaviour: any non-withdrawn status to any other.
    STRICT_STATUS_TRANSITIONS: bool = True

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
