"""
Global pytest configuration and fixtures.
"""
import os
from decimal import Decimal
from typing import Dict
from unittest.mock import MagicMock

import pytest

import toggl_billing.config.settings
from toggl_billing.config import BillingConfig, reload_config
from toggl_billing.config.logging_config import reset_logging
from toggl_billing.models.toggl import Account, Client, Project, TimeEntry


@pytest.fixture(scope="session")
def test_env_vars() -> Dict[str, str]:
    """Test environment variables for configuration."""
    return {
        'TOGGL_API_TOKEN': 'test-token',
        'TARGET_CLIENT': 'Acme Corp',
        'HOURLY_RATE': '100',
        'REQUEST_DELAY': '0',
        'ENVIRONMENT': 'testing',
        'LOG_LEVEL': 'DEBUG',
    }


@pytest.fixture
def mock_env(test_env_vars, monkeypatch, tmp_path):
    """Mock environment variables for testing."""
    for key, value in test_env_vars.items():
        monkeypatch.setenv(key, value)
    monkeypatch.setenv('BILLED_STORE_PATH', str(tmp_path / 'billed.sqlite3'))

    # Clear the global config to force reload with test values
    toggl_billing.config.settings._config = None

    yield test_env_vars

    toggl_billing.config.settings._config = None


@pytest.fixture
def test_config(mock_env) -> BillingConfig:
    """Test configuration instance."""
    return reload_config()


@pytest.fixture
def mock_toggl_client():
    """Toggl client double: project 10 -> client 5 'Acme Corp', project 20 -> client 6."""
    projects = {
        10: Project(id=10, name='Website', client_id=5),
        11: Project(id=11, name='Support', client_id=5),
        20: Project(id=20, name='Internal', client_id=6),
        30: Project(id=30, name='No client'),
    }
    clients = {
        5: Client(id=5, name='Acme Corp'),
        6: Client(id=6, name='Other Corp'),
    }

    client = MagicMock()
    client.get_account.return_value = Account(id=1, timezone='Europe/Berlin')
    client.get_time_entries.return_value = []
    client.get_project.side_effect = lambda project_id: projects[project_id]
    client.get_client.side_effect = lambda client_id: clients[client_id]
    return client


@pytest.fixture
def sample_entries():
    """Entries of a typical month, including ones that must be ignored."""
    return [
        TimeEntry(id=1, description='Development', duration=3600, project_id=10),
        TimeEntry(id=2, description='Development', duration=1800, project_id=11),
        TimeEntry(id=3, description='Meeting', duration=900, project_id=10),
        TimeEntry(id=4, description='Running', duration=-30, project_id=10),
        TimeEntry(id=5, description='Lunch', duration=2700),
        TimeEntry(id=6, description='Team', duration=3600, project_id=20),
        TimeEntry(id=7, description='Orphan', duration=600, project_id=30),
    ]


@pytest.fixture
def hourly_rate() -> Decimal:
    return Decimal('100')


@pytest.fixture(autouse=True)
def cleanup_logging():
    """Remove handlers installed by commands under test."""
    yield
    reset_logging()

    test_files = ['coverage.xml', '.coverage']
    for file in test_files:
        if os.path.exists(file):
            os.remove(file)


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )


def pytest_collection_modifyitems(config, items):
    """Add markers based on test location."""
    for item in items:
        if "tests/unit/" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
