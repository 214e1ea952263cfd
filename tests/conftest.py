"""
pytest configuration and fixtures for QuoteVault tests
"""

import pytest
import sys
from pathlib import Path

from fastapi.testclient import TestClient

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from api.app import create_app
from api.dependencies import get_auth_config
from database.connection import DatabaseManager, MEMORY_DB
from database.operations import QuoteOperations
from utils.config_manager import AuthConfig
from utils.security_utils import create_token

TEST_ADMIN_PASSWORD = "correct-horse-battery-staple"


@pytest.fixture
def auth_config():
    """Auth configuration with a known admin password"""
    return AuthConfig(admin_password=TEST_ADMIN_PASSWORD)


@pytest.fixture
async def quote_store():
    """In-memory quote store with tables created"""
    store = QuoteOperations(DatabaseManager(MEMORY_DB))
    await store.initialize()
    yield store
    await store.close()


@pytest.fixture
def app(auth_config):
    """Application backed by a fresh in-memory store"""
    application = create_app(QuoteOperations(DatabaseManager(MEMORY_DB)))
    application.dependency_overrides[get_auth_config] = lambda: auth_config
    return application


@pytest.fixture
def client(app):
    """Test client; the context manager runs the app lifespan"""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_headers(auth_config):
    """Cookie header carrying a freshly signed admin session"""
    token = create_token(auth_config.signing_secret)
    return {"Cookie": f"{auth_config.cookie_name}={token}"}


@pytest.fixture
def create_quote(client):
    """Factory that creates a quote through the API and returns its JSON"""
    def _create_quote(**payload):
        payload.setdefault("title", "A title")
        payload.setdefault("content", "Some content")
        response = client.post("/quotes", json=payload)
        assert response.status_code == 200, response.text
        return response.json()
    return _create_quote


# Pytest configuration
def pytest_configure(config):
    """Configure pytest"""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
