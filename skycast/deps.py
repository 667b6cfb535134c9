# ABOUTME: Factory for the shared httpx.AsyncClient used by the geocoder and fetcher.
# ABOUTME: One client per session so both forecast legs share a connection pool.

import httpx

from skycast.config import Settings

USER_AGENT = "skycast/0.1"


def create_http_client(settings: Settings) -> httpx.AsyncClient:
    """Create an httpx client with the configured timeout.

    No retrying transport is installed: every retry is user-initiated.
    """
    return httpx.AsyncClient(
        timeout=settings.http_timeout_seconds,
        headers={"Accept": "application/json", "User-Agent": USER_AGENT},
    )
