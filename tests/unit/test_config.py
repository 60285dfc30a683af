"""
Unit tests for configuration management.
"""

import os
from decimal import Decimal
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from fluxledger.aggregators.billing_aggregator import InvoiceRules
from fluxledger.calculators.fiscal_calculator import FiscalRules
from fluxledger.config.settings import (
    FluxLedgerConfig,
    get_config,
    reload_config,
)


class TestFluxLedgerConfig:
    """Test cases for FluxLedgerConfig."""

    def test_config_with_valid_env_vars(self, test_config, test_env_vars):
        """Test configuration loads correctly from environment variables."""
        assert test_config.data_file == test_env_vars["FLUXLEDGER_DATA_FILE"]
        assert test_config.default_user_id == "test-user"
        assert test_config.environment == "testing"
        assert test_config.debug is False
        assert test_config.log_level == "DEBUG"

    def test_fiscal_defaults(self, test_config):
        """Test the invoice and fiscal constants default to the current rules."""
        assert test_config.stamp_duty_amount == Decimal("2.00")
        assert test_config.surcharge_rate == Decimal("0.04")
        assert test_config.surcharge_threshold == Decimal("100")
        assert test_config.stamp_duty_suggestion_threshold == Decimal("77.47")
        assert test_config.profitability_coefficient == Decimal("0.78")
        assert test_config.social_fund_rate == Decimal("0.145")
        assert test_config.substitute_tax_rate == Decimal("0.05")
        assert test_config.trial_entry_limit == 15
        assert test_config.trial_days == 60

    def test_overrides(self, mock_env):
        """Test constants can be overridden from the environment."""
        with patch.dict(
            os.environ, {"SURCHARGE_THRESHOLD": "250", "PROFITABILITY_COEFFICIENT": "0.67"}
        ):
            config = FluxLedgerConfig()

        assert config.surcharge_threshold == Decimal("250")
        assert InvoiceRules.from_config(config).surcharge_threshold == Decimal("250")
        assert FiscalRules.from_config(config).profitability_coefficient == Decimal("0.67")

    @pytest.mark.parametrize(
        "key,value",
        [
            ("LOG_LEVEL", "LOUD"),
            ("ENVIRONMENT", "staging"),
            ("SURCHARGE_RATE", "-0.04"),
            ("SOCIAL_FUND_RATE", "14.5"),
            ("TRIAL_DAYS", "-1"),
        ],
    )
    def test_invalid_values(self, mock_env, key, value):
        """Test invalid settings are rejected."""
        with patch.dict(os.environ, {key: value}):
            with pytest.raises(ValidationError):
                FluxLedgerConfig()

    def test_log_level_normalized(self, mock_env):
        """Test the log level is upper-cased."""
        with patch.dict(os.environ, {"LOG_LEVEL": "warning"}):
            assert FluxLedgerConfig().log_level == "WARNING"


class TestGlobalConfig:
    """Test cases for the module-level accessors."""

    def test_get_config_is_cached(self, mock_env):
        """Test get_config returns the same instance until reloaded."""
        first = get_config()
        assert get_config() is first

        reloaded = reload_config()
        assert reloaded is not first
        assert get_config() is reloaded
