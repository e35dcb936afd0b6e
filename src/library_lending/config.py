"""Configuration management for the Library Lending server.

Settings are loaded from ``LIBRARY_LENDING_*`` environment variables (or a
``.env`` file) and validated with Pydantic v2:
1. Server metadata - name and version announced to MCP clients
2. Storage - SQLAlchemy URL, in-memory by default
3. Lending policy - loan period and the flat daily late fee
4. Development - logging level and debug switch
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LendingConfig(BaseSettings):
    """Lending server configuration.

    The defaults describe a self-contained process: the catalog lives in an
    in-memory SQLite database and is seeded with a small sample collection,
    so nothing survives a restart.
    """

    model_config = SettingsConfigDict(
        # Use LIBRARY_LENDING_ prefix for all env vars
        env_prefix="LIBRARY_LENDING_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Server Metadata ===

    server_name: str = Field(
        default="library-lending",
        description="Server name announced during the MCP handshake",
        pattern=r"^[a-z0-9-]+$",
    )

    server_version: str = Field(
        default="1.0.0",
        description="Server version for capability negotiation",
        pattern=r"^\d+\.\d+\.\d+(-[a-zA-Z0-9.]+)?$",
    )

    transport: str = Field(
        default="stdio",
        description="Transport used to talk to MCP clients",
        pattern=r"^(stdio|streamable_http)$",
    )

    # === Storage ===

    database_url: str = Field(
        default="sqlite://",
        description="SQLAlchemy URL of the store backend (in-memory SQLite by default)",
    )

    seed_sample_data: bool = Field(
        default=True,
        description="Load the sample catalog when the store starts empty",
    )

    # === Lending Policy ===

    loan_period_days: int = Field(
        default=14,
        description="Days between borrow date and due date",
        ge=1,
        le=365,
    )

    daily_late_fee: int = Field(
        default=5,
        description="Fine charged per whole day a return is late (integer units)",
        ge=0,
    )

    # === Development ===

    debug: bool = Field(
        default=False,
        description="Enable debug logging",
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
        pattern=r"^(DEBUG|INFO|WARNING|ERROR)$",
    )

    @field_validator("server_name")
    @classmethod
    def validate_server_name(cls, v: str) -> str:
        """Keep server names short enough for client UIs."""
        if len(v) < 3:
            raise ValueError("Server name must be at least 3 characters")
        if len(v) > 50:
            raise ValueError("Server name must not exceed 50 characters")
        return v

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Require something that looks like a SQLAlchemy URL."""
        if "://" not in v:
            raise ValueError("database_url must be a SQLAlchemy URL, e.g. 'sqlite://'")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.debug or self.log_level == "DEBUG"

    @property
    def is_in_memory(self) -> bool:
        """True when the store backend is a private in-memory SQLite database."""
        return self.database_url in ("sqlite://", "sqlite:///:memory:")

    @property
    def server_info(self) -> dict[str, str]:
        """Server information sent during the MCP handshake."""
        return {
            "name": self.server_name,
            "version": self.server_version,
            "transport": self.transport,
        }


class _ConfigStore:
    """Internal storage for configuration singleton."""

    _instance: LendingConfig | None = None


def get_config() -> LendingConfig:
    """Get or create the global configuration instance."""
    if _ConfigStore._instance is None:  # type: ignore[reportPrivateUsage]
        _ConfigStore._instance = LendingConfig()  # type: ignore[reportPrivateUsage]
    return _ConfigStore._instance  # type: ignore[reportPrivateUsage]


def reset_config() -> None:
    """Reset configuration (useful for testing)."""
    _ConfigStore._instance = None  # type: ignore[reportPrivateUsage]
