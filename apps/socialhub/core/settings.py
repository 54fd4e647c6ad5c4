from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Unified application settings for SocialHub.

    Loads from env with support for repo ".env" files. Avoids manual load_dotenv().
    """

    _app_env = (os.getenv("APP_ENV") or "").strip().lower()
    _env_files = (
        []
        if _app_env in {"test", "ci"}
        else [
            str((Path(__file__).resolve().parents[1] / ".env")),  # apps/socialhub/.env
            str((Path(__file__).resolve().parents[3] / ".env")),  # repo root .env
        ]
    )

    # Load env vars from apps/socialhub/.env first, then repo root .env
    model_config = SettingsConfigDict(
        env_file=_env_files,
        case_sensitive=False,
        extra="ignore",
    )

    # --- App / Core ---
    app_env: str = Field(default="dev", alias="APP_ENV")
    app_name: str = Field(default="socialhub", alias="APP_NAME")
    debug: bool = Field(default=False, alias="DEBUG")
    # Logging
    log_level: str | None = Field(default=None, alias="SOCIALHUB_LOG_LEVEL")
    log_level_fallback: str | None = Field(default=None, alias="LOG_LEVEL")

    cors_allow_origins: list[str] = Field(default=["*"], alias="CORS_ALLOW_ORIGINS")

    # --- Auth ---
    secret_key: SecretStr = Field(default=SecretStr("dev"), alias="SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_cookie: str = Field(default="token", alias="ACCESS_TOKEN_COOKIE")
    access_token_ttl_hours: int = Field(default=24, alias="ACCESS_TOKEN_TTL_HOURS", ge=1)
    verification_token_ttl_hours: int = Field(
        default=24, alias="VERIFICATION_TOKEN_TTL_HOURS", ge=1
    )
    bcrypt_rounds: int = Field(default=12, alias="BCRYPT_ROUNDS", ge=4, le=31)
    # Comma-separated suffixes such as "@example.edu"; empty allows every address.
    allowed_email_domains: str = Field(default="", alias="ALLOWED_EMAIL_DOMAINS")
    socket_require_auth: bool = Field(default=False, alias="SOCKET_REQUIRE_AUTH")

    # --- Mongo ---
    mongo_uri: str = Field(default="mongodb://localhost:27017", alias="MONGO_URI")
    mongo_database: str = Field(default="socialhub", alias="MONGO_DATABASE")
    mongo_app_name: str = Field(default="socialhub", alias="MONGO_APP_NAME")
    mongo_server_selection_timeout_ms: int = Field(
        default=30000, alias="MONGO_SERVER_SELECTION_TIMEOUT_MS", ge=100
    )

    # --- Redis / realtime ---
    redis_url: str = Field(default="redis://localhost:6379/0", alias="REDIS_URL")
    presence_backend: str = Field(default="memory", alias="PRESENCE_BACKEND")  # memory | redis
    presence_redis_key: str = Field(default="socialhub:presence", alias="PRESENCE_REDIS_KEY")

    # --- Media / stories ---
    media_upload_url: str | None = Field(default=None, alias="MEDIA_UPLOAD_URL")
    media_upload_timeout: int = Field(default=30, alias="MEDIA_UPLOAD_TIMEOUT", ge=1)
    story_ttl_hours: int = Field(default=24, alias="STORY_TTL_HOURS", ge=1, le=24 * 7)
    scheduled_upload_dir: str = Field(
        default=".socialhub_data/scheduled-uploads", alias="SCHEDULED_UPLOAD_DIR"
    )
    story_publish_interval_seconds: int = Field(
        default=60, alias="STORY_PUBLISH_INTERVAL_SECONDS", ge=5
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()


# Convenience singleton for modules expecting a module-level "settings"
settings = get_settings()
