"""
Pytest Configuration and Fixtures

Provides shared fixtures and configuration for all tests.
"""

import pytest
import sys
import os
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from pulseboard.config import Settings
from pulseboard.generation import TextGenerator
from pulseboard.storage import MemoryStorage, SQLiteStorage


FIXED_NOW = datetime(2026, 10, 15, 12, 0, 0, tzinfo=timezone.utc)


class TickingClock:
    """Clock that advances one second per reading, so creation order is unambiguous"""

    def __init__(self, start: datetime = FIXED_NOW):
        self.current = start

    def __call__(self) -> datetime:
        now = self.current
        self.current = self.current + timedelta(seconds=1)
        return now


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture(autouse=True)
def reset_resilience_state():
    """Reset all resilience state before each test"""
    from pulseboard.shared.resilience import reset_all
    reset_all()
    yield
    reset_all()


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def clock(fixed_now):
    return TickingClock(fixed_now)


@pytest.fixture
def memory_storage(clock):
    return MemoryStorage(clock=clock)


@pytest.fixture(params=["memory", "sqlite"])
def storage(request, clock, tmp_path):
    """Every local backend, for contract tests"""
    if request.param == "memory":
        yield MemoryStorage(clock=clock)
    else:
        store = SQLiteStorage(str(tmp_path / "pulseboard.db"), clock=clock)
        yield store
        store.close()


@pytest.fixture
def sample_project_fields():
    """Valid project fields as a client would submit them"""
    return {
        "title": "Payments Platform Migration",
        "project_type": "Infrastructure",
        "status": "In Progress",
        "solution_architect": "Priya Raman",
        "project_lead": "Marcus Chen",
        "team_members": "Alex Kim, Jordan Lee",
        "stakeholders": "Payments leadership",
        "wiki_link": "https://wiki.example.com/payments",
        "useful_links": "",
        "modified_date": "2026-10-01",
    }


@pytest.fixture
def test_settings():
    """Settings with no credentials and no demo data"""
    return Settings(seed_data=False)


@pytest.fixture
def mock_claude_response():
    """Mock Claude API response"""
    def _mock(content: str):
        mock_resp = Mock()
        mock_resp.content = [Mock(text=content)]
        return mock_resp
    return _mock


@pytest.fixture
def mock_client(mock_claude_response):
    """Anthropic client whose messages.create returns a fixed reply"""
    client = Mock()
    client.messages.create.return_value = mock_claude_response("Generated text.")
    return client


@pytest.fixture
def generator(mock_client):
    """Configured generator backed by the mocked client"""
    return TextGenerator(client=mock_client, model="claude-test", timeout=5.0)


@pytest.fixture
def unconfigured_generator():
    return TextGenerator()


# =============================================================================
# MARKERS
# =============================================================================

def pytest_configure(config):
    """Configure custom markers"""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )


# =============================================================================
# HOOKS
# =============================================================================

def pytest_collection_modifyitems(config, items):
    """Automatically add markers based on test location"""
    for item in items:
        if "test_api" in item.nodeid:
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)
