"""
Pytest configuration and shared fixtures for the test suite.
"""

import pytest
import sys
from pathlib import Path
from unittest.mock import Mock

# Add the package source to Python path for testing
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from healing_records.core.models import Locator, RecordConfiguration
from healing_records.data_access import Database
from healing_records.services import HealingService, MetricsDispatcher, MetricsGateway, SelectorService


@pytest.fixture
def database(tmp_path):
    """Create an initialized SQLite database in a temporary directory."""
    db = Database(str(tmp_path / "healing.db"))
    db.initialize_schema()
    return db


@pytest.fixture
def record_config():
    """Record-keeping policy with metrics enabled."""
    return RecordConfiguration(
        url_for_key=False,
        allow_metrics=True,
        default_project="no-project",
        replace_previous_results=False,
        metrics_max_workers=1
    )


@pytest.fixture
def metrics_gateway():
    """Mock metrics gateway recording every call."""
    return Mock(spec=MetricsGateway)


@pytest.fixture
def dispatcher():
    """Metrics dispatcher shut down after the test."""
    dispatcher = MetricsDispatcher(max_workers=1)
    yield dispatcher
    dispatcher.shutdown()


@pytest.fixture
def selector_service(database):
    return SelectorService(database)


@pytest.fixture
def original_locator():
    return Locator(value="#login-button", type="css")


@pytest.fixture
def selector(selector_service, original_locator):
    """A registered selector for LoginTest.testLogin."""
    return selector_service.register_selector(
        "LoginTest", "testLogin", original_locator, "findElement",
        "https://example.com/login", url_for_key=False
    )


@pytest.fixture
def healing_service(database, record_config, metrics_gateway, dispatcher, selector_service):
    """Healing service wired to a temporary database and a mock gateway."""
    return HealingService(
        database,
        record_config,
        metrics_gateway=metrics_gateway,
        dispatcher=dispatcher,
        selector_service=selector_service
    )


@pytest.fixture(autouse=True)
def setup_test_logging():
    """Set up logging for tests."""
    import logging
    logging.basicConfig(
        level=logging.DEBUG,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
