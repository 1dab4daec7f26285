"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.

Settings are frozen: signing secrets are read once at startup and never
mutated afterwards.
"""

from functools import lru_cache
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # MongoDB
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "job_portal"

    # JWT Auth - separate secrets for the two credentials
    access_token_secret: str = "change-this-access-secret"
    access_token_expire_minutes: int = 15
    refresh_token_secret: str = "change-this-refresh-secret"
    refresh_token_expire_days: int = 10
    jwt_algorithm: str = "HS256"

    # Cookies (disable `secure` only for plain-http local development)
    cookie_secure: bool = True

    # Cloudinary image hosting
    cloudinary_cloud_name: str = ""
    cloudinary_api_key: str = ""
    cloudinary_api_secret: str = ""

    # Uploads
    upload_dir: str = "./public/temp"
    max_image_size_mb: int = 5

    # App
    cors_origins: str = "*"
    log_level: str = "INFO"
    debug: bool = False

    @property
    def cors_origin_list(self) -> List[str]:
        """Parse CORS_ORIGINS into a list ("*" stays a wildcard)."""
        raw = self.cors_origins.strip()
        if raw == "*":
            return ["*"]
        return [o.strip() for o in raw.split(",") if o.strip()]

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        frozen=True,
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
