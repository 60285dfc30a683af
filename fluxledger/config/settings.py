"""
Configuration management for the ledger.
"""

from decimal import Decimal
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class FluxLedgerConfig(BaseSettings):
    """Configuration settings for the ledger."""

    # Storage Configuration
    data_file: str = Field(default="data/fluxledger.json", alias="FLUXLEDGER_DATA_FILE")
    default_user_id: str = Field(default="local", alias="FLUXLEDGER_USER_ID")

    # Application Configuration
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Invoice Configuration
    stamp_duty_amount: Decimal = Field(default=Decimal("2.00"), alias="STAMP_DUTY_AMOUNT")
    stamp_duty_suggestion_threshold: Decimal = Field(
        default=Decimal("77.47"), alias="STAMP_DUTY_SUGGESTION_THRESHOLD"
    )
    surcharge_rate: Decimal = Field(default=Decimal("0.04"), alias="SURCHARGE_RATE")
    surcharge_threshold: Decimal = Field(
        default=Decimal("100"), alias="SURCHARGE_THRESHOLD"
    )

    # Fiscal Configuration (regime forfettario)
    profitability_coefficient: Decimal = Field(
        default=Decimal("0.78"), alias="PROFITABILITY_COEFFICIENT"
    )
    social_fund_rate: Decimal = Field(default=Decimal("0.145"), alias="SOCIAL_FUND_RATE")
    substitute_tax_rate: Decimal = Field(
        default=Decimal("0.05"), alias="SUBSTITUTE_TAX_RATE"
    )

    # Subscription Configuration
    trial_entry_limit: int = Field(default=15, ge=0, alias="TRIAL_ENTRY_LIMIT")
    trial_days: int = Field(default=60, ge=0, alias="TRIAL_DAYS")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Ensure log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Ensure environment is valid."""
        valid_envs = ["development", "testing", "production"]
        if v.lower() not in valid_envs:
            raise ValueError(f"Environment must be one of: {valid_envs}")
        return v.lower()

    @field_validator(
        "stamp_duty_amount",
        "stamp_duty_suggestion_threshold",
        "surcharge_rate",
        "surcharge_threshold",
        "profitability_coefficient",
        "social_fund_rate",
        "substitute_tax_rate",
    )
    @classmethod
    def validate_non_negative(cls, v, info):
        """Rates and amounts cannot be negative."""
        if v < 0:
            raise ValueError(f"{info.field_name} cannot be negative")
        return v

    @field_validator("profitability_coefficient", "social_fund_rate", "substitute_tax_rate")
    @classmethod
    def validate_fraction(cls, v, info):
        """Percentages are expressed as fractions between 0 and 1."""
        if v > 1:
            raise ValueError(f"{info.field_name} must be a fraction between 0 and 1")
        return v


def load_config(env_file: Optional[str] = None) -> FluxLedgerConfig:
    """Load configuration from environment variables and .env file."""
    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    return FluxLedgerConfig()


# Global configuration instance
_config: Optional[FluxLedgerConfig] = None


def get_config() -> FluxLedgerConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config(env_file: Optional[str] = None) -> FluxLedgerConfig:
    """Reload configuration (useful for testing)."""
    global _config
    _config = load_config(env_file)
    return _config
