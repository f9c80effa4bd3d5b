"""Pytest configuration and fixtures for integration tests.

Integration tests call the live Gemini API. They load .env from the project root
and are skipped when GEMINI_API_KEY is not configured.
"""

import os
from pathlib import Path

import pytest
from dotenv import load_dotenv


def pytest_configure(config):
    """Load .env before collection so Config picks up the API key."""
    env_path = Path(__file__).parent.parent.parent / ".env"
    load_dotenv(env_path)


@pytest.fixture(scope="session", autouse=True)
def check_api_key():
    """Skip integration tests if GEMINI_API_KEY is not configured."""
    if not os.getenv("GEMINI_API_KEY"):
        pytest.skip(
            "Integration tests skipped. Missing API key: GEMINI_API_KEY. Please set it in your .env file.",
            allow_module_level=True,
        )
