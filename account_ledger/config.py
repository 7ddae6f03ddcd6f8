"""Ledger Configuration: environment-driven settings via pydantic-settings.

Invariants:
    - An explicit DATABASE_URL wins; otherwise the SQLite file lives at DB_ROOT/chat.db
    - Without DB_ROOT the SQLite file is resolved against the current working directory
    - get_settings() is cached (lru_cache), single instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for everything: a bare checkout runs against a local SQLite file
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Ledger settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore",
        populate_by_name=True,
    )

    # Database
    database_url: str | None = None
    db_root: Path | None = Field(default=None, validation_alias="DB_ROOT")
    db_filename: str = "chat.db"
    database_pool_size: int = 20
    database_max_overflow: int = 10
    database_echo: bool = False

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str | None) -> str | None:
        """Plain postgresql:// URLs need the asyncpg driver suffix."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v or None

    # Caller-side OCC retry
    occ_max_attempts: int = Field(default=5, ge=1)
    occ_base_delay_ms: int = Field(default=10, ge=0)
    occ_max_delay_ms: int = Field(default=500, ge=0)

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    def sqlite_path(self) -> Path:
        root = self.db_root if self.db_root is not None else Path.cwd()
        return (root / self.db_filename).resolve()

    def resolved_database_url(self) -> str:
        if self.database_url:
            return self.database_url
        return f"sqlite+aiosqlite:///{self.sqlite_path()}"


@lru_cache
def get_settings() -> Settings:
    return Settings()
