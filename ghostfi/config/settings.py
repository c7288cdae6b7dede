"""
Settings Module
===============

Pydantic-based configuration with environment variable loading.

Version: 0.1.0
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Deployment environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LedgerMode(str, Enum):
    """Ledger operation mode."""

    MOCK = "mock"
    TESTNET = "testnet"
    MAINNET = "mainnet"


class EngineSettings(BaseSettings):
    """External proving engine (nargo) configuration."""

    model_config = SettingsConfigDict(env_prefix="GHOSTFI_ENGINE_")

    binary: str = "nargo"
    package: str = "apply"
    parameter_file: str = "Params.toml"
    timeout_seconds: float = Field(default=300.0, gt=0)


class LedgerSettings(BaseSettings):
    """Lending contract configuration."""

    model_config = SettingsConfigDict(env_prefix="GHOSTFI_LEDGER_")

    mode: LedgerMode = LedgerMode.MOCK
    contract: str = ""


class Settings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables with sensible defaults.
    Use the global `settings` singleton or call `get_settings()`.
    """

    model_config = SettingsConfigDict(
        env_prefix="GHOSTFI_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # General
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = True
    log_level: LogLevel = LogLevel.INFO
    port: int = 3000

    # Prover account on the ledger
    account: str = "prover.testnet"
    secret: SecretStr = SecretStr("")
    rpc: str = "https://rpc.testnet.near.org"

    # Circuit workspace that nargo runs in
    circuit_workspace: Path = Field(default_factory=lambda: Path.cwd() / "circuits")
    proof_path: str = "proofs/apply.proof"

    engine: EngineSettings = Field(default_factory=EngineSettings)
    ledger: LedgerSettings = Field(default_factory=LedgerSettings)

    @field_validator("log_level", mode="before")
    @classmethod
    def uppercase_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Ensure log level is uppercase."""
        if isinstance(v, str):
            return LogLevel(v.upper())
        return v

    @property
    def proof_file(self) -> Path:
        """Location nargo emits proofs to and reads them from."""
        return self.circuit_workspace / self.proof_path

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        """Check if running in test mode."""
        return self.environment == Environment.TESTING


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Application settings singleton.
    """
    return Settings()
