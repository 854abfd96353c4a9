"""
Test Configuration Settings.

This module defines the test environment configuration using Pydantic's BaseSettings.
Pydantic automatically loads configuration from the test/.env file via env_file configuration.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

TEST_ROOT = Path(__file__).resolve().parent


class TestSettings(BaseSettings):
    """Settings used by the test suite only."""

    __test__ = False

    model_config = SettingsConfigDict(
        env_file=str(TEST_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_url: str = Field(
        default="sqlite+aiosqlite:///:memory:",
        alias="TEST_DATABASE_URL",
        description="Test database connection URL (defaults to in-memory SQLite)",
    )
    password_iterations: int = Field(
        default=1_000,
        alias="TEST_PASSWORD_ITERATIONS",
        description="PBKDF2 iterations for accounts created by tests; kept low for speed",
    )


test_settings = TestSettings()
