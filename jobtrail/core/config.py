"""Application configuration loaded from environment variables.

Settings for the database, the API server, logging and file uploads.
Uses pydantic-settings for validation and .env file support.
"""

from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Known insecure default password that must not be used in production
_INSECURE_DEFAULT_PASSWORD = "jobtrail_dev_password"  # nosec B105


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Database
    database_host: str = "localhost"
    database_port: int = 5432
    database_name: str = "jobtrail"
    database_user: str = "jobtrail_user"
    database_password: str = _INSECURE_DEFAULT_PASSWORD
    # Full SQLAlchemy URL; wins over the discrete fields above when set.
    # Example for a single-file local setup: sqlite+aiosqlite:///./jobtrail.db
    database_dsn: str = ""

    # API
    # 0.0.0.0 binds to all network interfaces (required for Docker containers)
    api_host: str = "0.0.0.0"  # nosec B104
    api_port: int = 8000

    # CORS
    # Default allows localhost:3000 for the board frontend in development
    allowed_origins: list[str] = ["http://localhost:3000"]

    # Application
    environment: str = "development"
    log_level: str = "INFO"

    # Uploads
    upload_root: Path = Path("uploads")
    max_upload_size_mb: int = 10

    @property
    def database_url(self) -> str:
        """Async database URL for SQLAlchemy."""
        if self.database_dsn:
            return self.database_dsn
        return (
            f"postgresql+asyncpg://{self.database_user}:{self.database_password}"
            f"@{self.database_host}:{self.database_port}/{self.database_name}"
        )

    @property
    def max_upload_size_bytes(self) -> int:
        """Upload size limit in bytes."""
        return self.max_upload_size_mb * 1024 * 1024

    @model_validator(mode="after")
    def check_settings(self) -> "Settings":
        """Validate cross-field requirements.

        Checks:
        - Upload size limit must be positive (all environments)
        - CORS must not use wildcard origin (incompatible with credentials)
        - Database password must not be the default in production, unless a
          full DSN is supplied
        """
        if self.max_upload_size_mb <= 0:
            msg = (
                "MAX_UPLOAD_SIZE_MB must be positive. "
                f"Got: {self.max_upload_size_mb}"
            )
            raise ValueError(msg)

        if "*" in self.allowed_origins:
            msg = (
                "ALLOWED_ORIGINS must not contain '*' (wildcard). "
                "CORS is configured with credentials, which browsers reject "
                "for wildcard origins."
            )
            raise ValueError(msg)

        if (
            self.environment == "production"
            and not self.database_dsn
            and self.database_password == _INSECURE_DEFAULT_PASSWORD
        ):
            msg = (
                "Cannot use default database password in production. "
                "Set DATABASE_PASSWORD environment variable to a secure value."
            )
            raise ValueError(msg)

        return self


settings = Settings()
