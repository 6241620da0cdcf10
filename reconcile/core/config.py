"""
Application configuration using pydantic-settings.
"""
import logging
from typing import Optional

from pydantic import field_validator, ValidationInfo
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_SQLITE_URL = "sqlite:////data/capydam.db"
DEFAULT_EXTERNAL_MARKER = "supabase.co"
DEFAULT_MIGRATED_PREFIX = "migration/"


class Settings(BaseSettings):
    """Application settings."""

    # Application
    app_name: str = "CapyDAM Reconcile"

    # Target database (the schema the web application owns)
    database_url: str = DEFAULT_SQLITE_URL

    # PostgreSQL override (optional)
    postgres_url: Optional[str] = None

    # Individual PostgreSQL components (optional - used in Docker)
    postgres_user: Optional[str] = None
    postgres_password: Optional[str] = None
    postgres_db: Optional[str] = None
    postgres_host: Optional[str] = None
    postgres_port: Optional[int] = None

    # Legacy MySQL store (read-only, used by the legacy introspector)
    legacy_db_host: str = "localhost"
    legacy_db_port: int = 3306
    legacy_db_user: str = "resourcespace_rw"
    legacy_db_password: Optional[str] = None
    legacy_db_name: str = "resourcespace"
    legacy_db_connect_timeout: int = 10

    # Reference classification
    external_marker: str = DEFAULT_EXTERNAL_MARKER  # host fragment of the old storage provider
    target_marker: Optional[str] = None  # host fragment of the new storage, e.g. "storage.capy-dev.com"

    # Scan / audit tuning
    scan_batch_size: int = 500
    thumbnail_sample_size: int = 5
    description_sample_size: int = 10
    description_preview_length: int = 100
    migrated_filename_prefix: str = DEFAULT_MIGRATED_PREFIX
    empty_counts_as_migrated: bool = True  # entities without any reference count as done

    # Logging
    log_level: str = "INFO"
    log_dir: str = "/data/logs"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def database_type(self) -> str:
        """Detect database type from configuration."""
        if self.postgres_url or (self.postgres_host and self.postgres_user):
            return "postgresql"

        if self.database_url.startswith(("postgresql", "postgres")):
            return "postgresql"

        return "sqlite"

    @property
    def effective_database_url(self) -> str:
        """Get the effective database URL based on configuration hierarchy."""
        # Priority 1: Explicit PostgreSQL URL
        if self.postgres_url:
            return self.postgres_url

        # Priority 2: PostgreSQL components (Docker environment)
        if self.postgres_host and self.postgres_user and self.postgres_db:
            password = self.postgres_password or ""
            port = self.postgres_port or 5432
            return f"postgresql://{self.postgres_user}:{password}@{self.postgres_host}:{port}/{self.postgres_db}"

        # Priority 3: Primary database URL (defaults to SQLite)
        return self.database_url

    @field_validator('database_url')
    @classmethod
    def validate_database_url(cls, v: str, info: ValidationInfo) -> str:
        """Validate primary database URL."""
        if not v or not v.strip():
            logger.info(
                "DATABASE_URL not provided; defaulting to SQLite at %s", DEFAULT_SQLITE_URL
            )
            return DEFAULT_SQLITE_URL

        url = v.strip()
        if url.startswith(("sqlite", "postgresql", "postgres")):
            return url

        logger.warning(
            "DATABASE_URL uses unsupported or untested dialect '%s'. Proceed with caution.",
            url.split("://", 1)[0]
        )
        return url

    @field_validator('postgres_url')
    @classmethod
    def validate_postgres_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate PostgreSQL override URL."""
        if not v or not v.strip():
            return None

        url = v.strip()
        if not url.startswith(("postgresql", "postgres")):
            raise ValueError(
                "POSTGRES_URL must be a PostgreSQL URL (postgresql:// or postgres://)"
            )
        return url

    @field_validator('external_marker')
    @classmethod
    def validate_external_marker(cls, v: str) -> str:
        """The marker is matched as an exact substring, so it must not be blank."""
        if not v or not v.strip():
            raise ValueError("EXTERNAL_MARKER must be a non-empty host fragment, e.g. 'supabase.co'")
        return v.strip()

    @field_validator('target_marker')
    @classmethod
    def validate_target_marker(cls, v: Optional[str]) -> Optional[str]:
        if not v or not v.strip():
            return None
        return v.strip()

    @field_validator(
        'scan_batch_size',
        'thumbnail_sample_size',
        'description_sample_size',
        'description_preview_length',
    )
    @classmethod
    def validate_positive(cls, v: int, info: ValidationInfo) -> int:
        """Validate batch and sample sizes are positive."""
        if v <= 0:
            raise ValueError(f"{info.field_name.upper()} must be a positive integer")
        return v

    @field_validator('scan_batch_size')
    @classmethod
    def validate_scan_batch_size(cls, v: int) -> int:
        if v > 10000:
            logger.warning(
                f"SCAN_BATCH_SIZE={v} is large; scans hold one batch in memory at a time."
            )
        return v

    @field_validator('legacy_db_port')
    @classmethod
    def validate_legacy_db_port(cls, v: int) -> int:
        if not 0 < v < 65536:
            raise ValueError("LEGACY_DB_PORT must be between 1 and 65535")
        return v


settings = Settings()
