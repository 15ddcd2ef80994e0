"""
Shared fixtures: a stub eBird upstream behind the real proxy app.

The client reaches the proxy in-process through ``httpx.ASGITransport`` and
the proxy reaches "eBird" through ``httpx.MockTransport``, so every test runs
the full client → proxy → upstream path without a socket.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

import httpx
import pytest

from rare_bird_alerts.config import Settings
from rare_bird_alerts.datasources.ebird import EBirdApiClient
from rare_bird_alerts.proxy import create_app

Handler = Callable[[httpx.Request], httpx.Response | Awaitable[httpx.Response]]

PROXY_BASE = "http://proxy.test"

SAMPLE_SIGHTINGS: list[dict[str, Any]] = [
    {
        "speciesCode": "snoowl1",
        "comName": "Snowy Owl",
        "sciName": "Bubo scandiacus",
        "locId": "L109145",
        "locName": "Jones Beach SP--West End",
        "obsDt": "2026-01-12 08:30",
        "howMany": 1,
        "lat": 40.5898,
        "lng": -73.5423,
        "obsValid": True,
        "obsReviewed": False,
        "locationPrivate": False,
        "subnational2Code": "US-NY-059",
        "subnational2Name": "Nassau",
        "subnational1Code": "US-NY",
        "subnational1Name": "New York",
        "countryCode": "US",
        "countryName": "United States",
        "userDisplayName": "Pat Birder",
        "subId": "S158000001",
        "obsId": "OBS2000000001",
        "checklistId": "CL24001",
        "presenceNoted": False,
        "hasComments": True,
        "hasRichMedia": False,
    },
    {
        "speciesCode": "pinjay",
        "comName": "Pinyon Jay",
        "sciName": "Gymnorhinus cyanocephalus",
        "locId": "L2000001",
        "locName": "Central Park--The Ramble",
        "obsDt": "2026-01-11 14:05",
        "lat": 40.7769,
        "lng": -73.9713,
        "obsValid": False,
        "obsReviewed": False,
        "locationPrivate": True,
        "subnational1Code": "US-NY",
        "subnational1Name": "New York",
        "countryCode": "US",
        "countryName": "United States",
        "userDisplayName": "Sam Lister",
        "subId": "S158000002",
        "obsId": "OBS2000000002",
        "checklistId": "CL24002",
    },
]


@dataclass
class StubUpstream:
    """Records every request the proxy sends to "eBird"."""

    handler: Handler
    requests: list[httpx.Request] = field(default_factory=list)

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.handler(request)
        if not isinstance(response, httpx.Response):
            response = await response
        return response

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def make_settings() -> Settings:
    return Settings(_env_file=None, ebird_api_key=None)


def make_client(upstream: StubUpstream) -> EBirdApiClient:
    """An API client wired through the real proxy app to ``upstream``."""
    app = create_app(make_settings(), upstream_transport=httpx.MockTransport(upstream))
    return EBirdApiClient(PROXY_BASE, transport=httpx.ASGITransport(app=app))


def json_upstream(payload: Any, status_code: int = 200) -> StubUpstream:
    return StubUpstream(lambda _request: httpx.Response(status_code, json=payload))


@pytest.fixture
def sightings_upstream() -> StubUpstream:
    return json_upstream(SAMPLE_SIGHTINGS)
