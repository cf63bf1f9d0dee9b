"""DoConnect settings, read from the environment and an optional .env file.

Invariants:
    - Defaults only suit a local development stack; deployments override
      JWT_SECRET_KEY, DATABASE_URL and the admin credentials
    - get_settings() returns one cached Settings per process
    - database_url always names an async driver (asyncpg or aiosqlite)

Design Decisions:
    - JWT issuer/audience/lifetime are settings rather than security-module
      constants, so tests and deployments change them without code edits
"""

from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = "postgresql+asyncpg://doconnect:doconnect@db:5432/doconnect"

    @field_validator("database_url", mode="before")
    @classmethod
    def use_async_driver(cls, value):
        """Rewrite bare postgres:// and postgresql:// URLs to the asyncpg dialect."""
        if isinstance(value, str):
            for prefix in ("postgres://", "postgresql://"):
                if value.startswith(prefix):
                    return "postgresql+asyncpg://" + value[len(prefix):]
        return value

    database_pool_size: int = 20
    database_max_overflow: int = 10
    create_tables_on_startup: bool = False

    # JWT
    jwt_secret_key: str = "dev-secret-key-change-in-production-0123456789"
    jwt_issuer: str = "DoConnect.API"
    jwt_audience: str = "DoConnect.Client"
    jwt_algorithm: str = "HS256"
    jwt_expiration_days: int = 7

    # Uploads
    upload_dir: Path = Path("uploads/images")
    max_upload_size_mb: int = 5
    allowed_image_extensions: list[str] = [
        ".jpg", ".jpeg", ".png", ".gif", ".bmp",
    ]

    # Seeding
    seed_on_startup: bool = True
    admin_user_name: str = "admin"
    admin_email: str = "admin@doconnect.com"
    admin_password: str = "Admin@123"

    # API
    cors_origins: list[str] = ["http://localhost:4200"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024


@lru_cache
def get_settings() -> Settings:
    return Settings()
