"""Shared fixtures for the PreferredPictures signer test suite."""

import pytest

from preferred_pictures.client.client import Client
from preferred_pictures.client.models import ClientConfig
from preferred_pictures.config.settings import get_settings
from preferred_pictures.signing.random_source import SeededRandomSource

SECRET_KEY = "secret123456"
FIXED_NOW = 994000  # expiration == 1000000 with expiration_ttl=6000


@pytest.fixture
def config() -> ClientConfig:
    """A typical client config for testing."""
    return ClientConfig(identity="testidentity", secret_key=SECRET_KEY)


@pytest.fixture
def client() -> Client:
    """Client with a frozen clock and a seeded random source."""
    return Client(
        "testidentity",
        SECRET_KEY,
        random_source=SeededRandomSource(42),
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def override_settings(monkeypatch):
    """Factory fixture: set env vars and clear settings cache.

    Usage:
        override_settings(PREFERRED_PICTURES_IDENTITY="acct", LOG_LEVEL="DEBUG")
    """
    def _override(**kwargs):
        for key, value in kwargs.items():
            monkeypatch.setenv(key.upper(), str(value))
        # Clear lru_cache so Settings re-reads env
        get_settings.cache_clear()

    yield _override

    # Always clear cache on teardown so other tests get fresh settings
    get_settings.cache_clear()
