# investment_tracker/config.py
"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables with validation:
- ENVIRONMENT: Runtime mode (development, test, production)
- HOME_CURRENCY: Currency every ledger, bank account and summary converts into
- XIRR_*: Solver tuning for the XIRR calculator
- IMPORT_*: Limits applied to currency transaction CSV imports

Configuration is validated on first import. Invalid configuration
will raise a ValueError with a descriptive message.

Usage:
    from investment_tracker.config import settings

    if settings.home_currency == "TWD":
        ...
"""
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from investment_tracker.services.constants import (
    DEFAULT_HOME_CURRENCY,
    IMPORT_MAX_ROWS,
    IMPORT_NOTES_MAX_LENGTH,
    IRR_MAX_ITERATIONS,
    IRR_TOLERANCE,
)


# The .env file lives in the repository root (parent of the package)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment variables:
        - ENVIRONMENT: Runtime environment (development, test, production)
        - LOG_LEVEL: Logging level (default: "INFO")
        - LOG_FORMAT: "text" or "json" (default: "text")
        - HOME_CURRENCY: ISO 4217 home currency (default: "TWD")

    Calculation Settings (optional, with sensible defaults):
        - XIRR_MAX_ITERATIONS: Newton-Raphson iteration cap (default: 100)
        - XIRR_TOLERANCE: Convergence tolerance (default: 1e-7)
        - IMPORT_MAX_ROWS: Maximum data rows per CSV import (default: 5000)
        - IMPORT_NOTES_MAX_LENGTH: Maximum notes length (default: 500)
    """

    # Environment mode
    environment: Literal["development", "test", "production"] = Field(
        default="development",
        description="Runtime environment (development, test, production)"
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    log_format: Literal["text", "json"] = Field(
        default="text",
        description="Log output format (text for humans, json for aggregation)"
    )

    # =========================================================================
    # CURRENCY
    # =========================================================================
    home_currency: str = Field(
        default=DEFAULT_HOME_CURRENCY,
        description="Home currency used for cost basis and summary conversion"
    )

    # =========================================================================
    # XIRR SOLVER
    # =========================================================================
    xirr_max_iterations: int = Field(
        default=IRR_MAX_ITERATIONS,
        ge=10,
        le=10_000,
        description="Maximum Newton-Raphson iterations before bisection fallback"
    )
    xirr_tolerance: float = Field(
        default=IRR_TOLERANCE,
        gt=0,
        description="Convergence tolerance for the XIRR solver"
    )

    # =========================================================================
    # CSV IMPORT
    # =========================================================================
    import_max_rows: int = Field(
        default=IMPORT_MAX_ROWS,
        ge=1,
        le=100_000,
        description="Maximum number of data rows accepted in one import"
    )
    import_notes_max_length: int = Field(
        default=IMPORT_NOTES_MAX_LENGTH,
        ge=1,
        description="Maximum length of transaction notes"
    )

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode="after")
    def validate_home_currency(self) -> "Settings":
        """
        Normalize and validate the home currency.

        Rules:
        - Surrounding whitespace is ignored and the code is upper-cased
        - The result must be a three-letter ISO 4217 code
        """
        normalized = self.home_currency.strip().upper()
        if len(normalized) != 3 or not normalized.isalpha() or not normalized.isascii():
            raise ValueError(
                f"HOME_CURRENCY must be a 3-letter ISO 4217 code, got: '{self.home_currency}'"
            )
        object.__setattr__(self, "home_currency", normalized)
        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_test(self) -> bool:
        """Check if running in test environment."""
        return self.environment == "test"


# Create single instance
settings = Settings()
