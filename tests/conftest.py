# ABOUTME: Shared test fixtures for the skycast test suite.
# ABOUTME: Keeps log output quiet and provides the fake API key used across tests.

import logging

import pytest

from payloads import API_KEY, BASE_URL


@pytest.fixture
def api_key() -> str:
    return API_KEY


@pytest.fixture
def base_url() -> str:
    return BASE_URL


@pytest.fixture(autouse=True)
def _quiet_httpx_logs():
    logging.getLogger("httpx").setLevel(logging.WARNING)
