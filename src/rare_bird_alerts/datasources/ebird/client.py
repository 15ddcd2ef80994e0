"""eBird API v2 endpoint paths and proxy constants.

API docs: https://documenter.getpostman.com/view/664302/S1ENwy59
Region codes: country (``US``), subnational1 (``US-NY``), subnational2
(``US-NY-109``) or a location id (``L123456``).
"""

from __future__ import annotations

# Path on the proxy that forwards to eBird
PROXY_PATH = "/api/ebird"
DEFAULT_PROXY_URL = "http://127.0.0.1:8000"

# Query parameters consumed by the proxy itself
ENDPOINT_PARAM = "endpoint"
CREDENTIAL_PARAM = "apiKey"

# Cheapest query that still proves a key works
BASELINE_REGION = "US"
PROBE_PARAMS = {"back": "1", "maxResults": "1"}


def notable_observations_path(region_code: str) -> str:
    """Recent notable observations in a region: ``/data/obs/{region}/recent/notable``."""
    return f"/data/obs/{region_code}/recent/notable"
