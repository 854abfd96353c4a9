"""
Configuration Settings.

This module defines the application configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and .env file
without explicit dotenv loading.
"""

from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# =====================================================================
# Grouped Configuration Models
# =====================================================================


class DatabaseConfig(BaseModel):
    """Application database configuration."""

    url: str = Field(
        default="sqlite+aiosqlite:///./bookbridge.db",
        alias="BOOKBRIDGE_DATABASE_URL",
        description="Async database URL (sqlite+aiosqlite or postgresql+asyncpg)",
    )
    echo: bool = Field(default=False, alias="BOOKBRIDGE_DATABASE_ECHO", description="Echo SQL statements")
    auto_create: bool = Field(
        default=True,
        alias="BOOKBRIDGE_DATABASE_AUTO_CREATE",
        description="Create tables at startup instead of relying on Alembic migrations",
    )

    model_config = {"populate_by_name": True}


class AuthConfig(BaseModel):
    """Bearer token and password hashing configuration."""

    token_ttl_seconds: int = Field(
        default=7 * 24 * 3600,
        alias="BOOKBRIDGE_AUTH_TOKEN_TTL_SECONDS",
        description="Lifetime of an issued bearer token in seconds",
    )
    password_iterations: int = Field(
        default=260_000,
        alias="BOOKBRIDGE_AUTH_PASSWORD_ITERATIONS",
        description="PBKDF2-SHA256 iterations for new password hashes",
    )
    min_password_length: int = Field(
        default=6, alias="BOOKBRIDGE_AUTH_MIN_PASSWORD_LENGTH", description="Minimum accepted password length"
    )

    model_config = {"populate_by_name": True}


class StorageConfig(BaseModel):
    """Object storage configuration."""

    root: str = Field(
        default="./storage", alias="BOOKBRIDGE_STORAGE_ROOT", description="Directory holding one folder per bucket"
    )
    public_base_url: str = Field(
        default="/api/v1/storage",
        alias="BOOKBRIDGE_STORAGE_PUBLIC_BASE_URL",
        description="Prefix of the public URLs returned for uploaded objects",
    )
    max_bytes: int = Field(
        default=5 * 1024 * 1024, alias="BOOKBRIDGE_STORAGE_MAX_BYTES", description="Largest accepted upload in bytes"
    )

    model_config = {"populate_by_name": True}


class AssistantConfig(BaseModel):
    """Ask-AI assistant configuration."""

    model: Optional[str] = Field(
        default=None,
        alias="BOOKBRIDGE_ASSISTANT_MODEL",
        description="pydantic-ai model name, e.g. 'openai:gpt-4o'; the assistant is disabled when unset",
    )
    max_question_length: int = Field(
        default=2000, alias="BOOKBRIDGE_ASSISTANT_MAX_QUESTION_LENGTH", description="Longest accepted question"
    )

    model_config = {"populate_by_name": True}


class CORSConfig(BaseModel):
    """CORS configuration."""

    origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS", description="Allowed CORS origins (use * for all)")
    allow_credentials: bool = Field(
        default=True, alias="CORS_ALLOW_CREDENTIALS", description="Allow credentials in CORS requests"
    )
    allow_methods: list[str] = Field(
        default=["*"], alias="CORS_ALLOW_METHODS", description="Allowed HTTP methods (use * for all)"
    )
    allow_headers: list[str] = Field(
        default=["*"], alias="CORS_ALLOW_HEADERS", description="Allowed HTTP headers (use * for all)"
    )

    model_config = {"populate_by_name": True}


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    Application settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
        populate_by_name=True,
    )

    # =====================================================================
    # BookBridge Server Configuration
    # =====================================================================
    server_host: str = Field(default="0.0.0.0", description="Server host address to bind to", alias="BOOKBRIDGE_SERVER_HOST")
    server_port: int = Field(default=8000, description="Server port number", alias="BOOKBRIDGE_SERVER_PORT")
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="BOOKBRIDGE_LOG_LEVEL",
    )
    log_format: str = Field(
        default="detailed", description="Log line format (simple, detailed, json)", alias="BOOKBRIDGE_LOG_FORMAT"
    )
    log_file_dir: str = Field(default="logs", description="Directory for log files", alias="BOOKBRIDGE_LOG_FILE_DIR")
    enable_file_logging: bool = Field(
        default=False, description="Also write logs to files", alias="BOOKBRIDGE_ENABLE_FILE_LOGGING"
    )

    # =====================================================================
    # Database Configuration
    # =====================================================================
    database_url: str = Field(default="sqlite+aiosqlite:///./bookbridge.db", alias="BOOKBRIDGE_DATABASE_URL")
    database_echo: bool = Field(default=False, alias="BOOKBRIDGE_DATABASE_ECHO")
    database_auto_create: bool = Field(default=True, alias="BOOKBRIDGE_DATABASE_AUTO_CREATE")

    # =====================================================================
    # Auth Configuration
    # =====================================================================
    auth_token_ttl_seconds: int = Field(default=7 * 24 * 3600, alias="BOOKBRIDGE_AUTH_TOKEN_TTL_SECONDS")
    auth_password_iterations: int = Field(default=260_000, alias="BOOKBRIDGE_AUTH_PASSWORD_ITERATIONS")
    auth_min_password_length: int = Field(default=6, alias="BOOKBRIDGE_AUTH_MIN_PASSWORD_LENGTH")

    # =====================================================================
    # Storage Configuration
    # =====================================================================
    storage_root: str = Field(default="./storage", alias="BOOKBRIDGE_STORAGE_ROOT")
    storage_public_base_url: str = Field(default="/api/v1/storage", alias="BOOKBRIDGE_STORAGE_PUBLIC_BASE_URL")
    storage_max_bytes: int = Field(default=5 * 1024 * 1024, alias="BOOKBRIDGE_STORAGE_MAX_BYTES")

    # =====================================================================
    # Assistant Configuration
    # =====================================================================
    assistant_model: Optional[str] = Field(default=None, alias="BOOKBRIDGE_ASSISTANT_MODEL")
    assistant_max_question_length: int = Field(default=2000, alias="BOOKBRIDGE_ASSISTANT_MAX_QUESTION_LENGTH")

    # =====================================================================
    # CORS Configuration
    # =====================================================================
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(default=["*"], alias="CORS_ALLOW_METHODS")
    cors_allow_headers: list[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    # =====================================================================
    # Computed Properties (Grouped Configurations)
    # =====================================================================

    @property
    def database(self) -> DatabaseConfig:
        """Get database configuration from environment variables."""
        return DatabaseConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def auth(self) -> AuthConfig:
        """Get auth configuration from environment variables."""
        return AuthConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def storage(self) -> StorageConfig:
        """Get storage configuration from environment variables."""
        return StorageConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def assistant(self) -> AssistantConfig:
        """Get assistant configuration from environment variables."""
        return AssistantConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def cors(self) -> CORSConfig:
        """Get CORS configuration from environment variables."""
        return CORSConfig.model_validate(self.model_dump(by_alias=True))


settings = Settings()
