# ================================
# file: ncc_portal/core/config.py
# ================================
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # Any SQLAlchemy URL; override with DB_URL env var or .env
    DB_URL: str = "sqlite:///./ncc_portal.db"

    # Signed cookie session
    SESSION_SECRET: str = "change-me-please"
    SESSION_MAX_AGE: int = 60 * 60 * 24 * 7  # 7 days
    IDLE_TIMEOUT_SEC: int = 60 * 60

    # urlsafe base64 of 32 random bytes. Empty -> ephemeral key (dev only)
    FIELD_ENCRYPTION_KEY: str = ""

    BCRYPT_ROUNDS: int = 12
    PASSWORD_PEPPER: str = ""

    AUDIT_HMAC_SECRET: str = "audit-dev"

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

settings = Settings()
