"""Application configuration using pydantic-settings."""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    DATABASE_URL: str = "sqlite:///./finance.db"

    # Exchange rates
    FX_LOOKBACK_DAYS: int = 10
    FX_REFERENCE_PAIR: str = "USD/ARS"
    LOCAL_CURRENCY: str = "ARS"
    REPORTING_CURRENCY: str = "USD"

    # Rental indexation
    DEFAULT_INFLATION_INDEX: str = "IPC"
    INDEX_COMPOUNDING: str = "compounded"

    # Seconds to wait for another regeneration of the same entity
    REGENERATION_LOCK_TIMEOUT: float = 30.0

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize LOG_LEVEL to an uppercase Python logging level."""
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"LOG_LEVEL must be one of {valid}, got {v!r}")
        return v.upper()

    @field_validator("INDEX_COMPOUNDING", mode="before")
    @classmethod
    def validate_index_compounding(cls, v: str) -> str:
        """Accept only the adjustment rules the rental generator implements."""
        valid = {"compounded", "prior_month"}
        if v.lower() not in valid:
            raise ValueError(f"INDEX_COMPOUNDING must be one of {valid}, got {v!r}")
        return v.lower()

    @field_validator("FX_REFERENCE_PAIR", mode="before")
    @classmethod
    def validate_reference_pair(cls, v: str) -> str:
        """Normalize ``usd/ars`` style pairs to ``USD/ARS``."""
        parts = v.split("/")
        if len(parts) != 2 or not all(p.strip() for p in parts):
            raise ValueError(f"FX_REFERENCE_PAIR must look like 'USD/ARS', got {v!r}")
        return "/".join(p.strip().upper() for p in parts)

    @field_validator("FX_LOOKBACK_DAYS")
    @classmethod
    def validate_lookback(cls, v: int) -> int:
        """The look-back window must be a bounded, non-negative day count."""
        if v < 0:
            raise ValueError("FX_LOOKBACK_DAYS must be >= 0")
        return v

    # App settings
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"


settings = Settings()
