"""
Configuration des tests pytest.
"""
import pytest
import sys
import os

# Ajoute src au path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from nim_proxy.config.settings import Settings  # noqa: E402

TEST_BASE_URL = "http://nim.test"
TEST_API_KEY = "nvapi-test-key-123456"


def pytest_configure(config):
    """Déclare les markers du projet."""
    config.addinivalue_line("markers", "unit: test unitaire")
    config.addinivalue_line("markers", "e2e: test de bout en bout (app + backend simulé)")


@pytest.fixture
def settings():
    """Configuration de test (backend simulé)."""
    return Settings(nim_api_base=TEST_BASE_URL, nim_api_key=TEST_API_KEY)


@pytest.fixture
def sample_messages():
    """Fixture pour des messages de test."""
    return [
        {"role": "system", "content": "Tu es un assistant utile."},
        {"role": "user", "content": "Bonjour, comment ça va?", "name": "alice"},
        {"role": "assistant", "content": "Je vais bien, merci!"}
    ]
