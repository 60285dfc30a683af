"""
Global pytest configuration and fixtures.
"""
import datetime as dt
import os
from decimal import Decimal
from typing import Dict, List

import pytest

from fluxledger.config import FluxLedgerConfig, reload_config
from fluxledger.config.logging_config import reset_logging
from fluxledger.models import BillingType, Expense, Project, TimeEntry
from fluxledger.services.ledger_store import LedgerStore

USER_ID = "test-user"


def utc(year, month, day, hour=0, minute=0) -> dt.datetime:
    """Aware UTC datetime shortcut for fixtures and tests."""
    return dt.datetime(year, month, day, hour, minute, tzinfo=dt.timezone.utc)


@pytest.fixture
def test_env_vars(tmp_path) -> Dict[str, str]:
    """Test environment variables for configuration."""
    return {
        'FLUXLEDGER_DATA_FILE': str(tmp_path / "ledger.json"),
        'FLUXLEDGER_USER_ID': USER_ID,
        'ENVIRONMENT': 'testing',
        'DEBUG': 'false',
        'LOG_LEVEL': 'DEBUG',
        'LOG_CONSOLE': 'false',
    }


@pytest.fixture
def mock_env(test_env_vars, monkeypatch):
    """Mock environment variables for testing."""
    for key, value in test_env_vars.items():
        monkeypatch.setenv(key, value)

    # Clear the global config to force reload with test values
    import fluxledger.config.settings
    fluxledger.config.settings._config = None

    yield test_env_vars

    fluxledger.config.settings._config = None
    reset_logging()


@pytest.fixture
def test_config(mock_env) -> FluxLedgerConfig:
    """Test configuration instance."""
    return reload_config()


@pytest.fixture
def store(tmp_path) -> LedgerStore:
    """Empty store backed by a temporary file."""
    return LedgerStore(tmp_path / "ledger.json")


@pytest.fixture
def sample_projects() -> List[Project]:
    """Two clients, one hourly and one on a daily fee."""
    return [
        Project(id="p-rossi", name="Studio Rossi", default_hourly_rate=Decimal("40")),
        Project(
            id="p-cantiere",
            name="Cantiere Verdi",
            default_hourly_rate=Decimal("250"),
            default_billing_type=BillingType.DAILY,
        ),
    ]


@pytest.fixture
def sample_entries() -> List[TimeEntry]:
    """Entries over two months and both billing types."""
    return [
        TimeEntry(
            id="e-1",
            project_id="p-rossi",
            description="Rilievo",
            start_time=utc(2024, 3, 4, 9),
            end_time=utc(2024, 3, 4, 10, 30),
            duration=5400,
            hourly_rate=Decimal("40"),
        ),
        TimeEntry(
            id="e-2",
            project_id="p-cantiere",
            description="Direzione lavori",
            start_time=utc(2024, 3, 5, 8),
            hourly_rate=Decimal("250"),
            billing_type=BillingType.DAILY,
            expenses=[Expense(description="Pedaggio", amount=Decimal("12.50"))],
        ),
        TimeEntry(
            id="e-3",
            project_id="p-rossi",
            description="Pratica catastale",
            start_time=utc(2024, 4, 2, 14),
            end_time=utc(2024, 4, 2, 16),
            duration=7200,
            hourly_rate=Decimal("40"),
            is_billed=True,
        ),
    ]


@pytest.fixture
def populated_store(store, sample_projects, sample_entries) -> LedgerStore:
    """Store holding the sample projects and entries for USER_ID."""
    for project in sample_projects:
        store.save_project(project, USER_ID)
    for entry in sample_entries:
        store.save_entry(entry, USER_ID)
    return store


@pytest.fixture(autouse=True)
def cleanup_test_files():
    """Clean up any test files created during testing."""
    yield

    test_files = ['coverage.xml', '.coverage']
    for file in test_files:
        if os.path.exists(file):
            os.remove(file)


# Pytest configuration for different test types
def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "cli: mark test as exercising the command line"
    )


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers based on location."""
    for item in items:
        if "tests/unit/" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        if "tests/unit/cli/" in str(item.fspath):
            item.add_marker(pytest.mark.cli)
