"""
Tests for the request proxy: the forwarder and its FastAPI surface.
"""

from __future__ import annotations

import asyncio
import logging

import httpx
from conftest import SAMPLE_SIGHTINGS, StubUpstream, json_upstream, make_settings
from fastapi.testclient import TestClient

from rare_bird_alerts import __version__
from rare_bird_alerts.proxy import (
    CREDENTIAL_HEADER,
    FALLBACK_STATUS,
    RequestProxy,
    create_app,
)
from rare_bird_alerts.services.http import CredentialRedactingFilter

NOTABLE = "/data/obs/US-NY/recent/notable"


def _proxy(upstream: StubUpstream) -> RequestProxy:
    return RequestProxy(transport=httpx.MockTransport(upstream))


# =============================================================================
# RequestProxy.forward
# =============================================================================


class TestForward:
    """Direct calls to RequestProxy.forward."""

    def test_missing_endpoint(self) -> None:
        upstream = json_upstream([])
        result = asyncio.run(_proxy(upstream).forward("", "abc123"))
        assert result.status_code == 400
        assert result.body["code"] == "missing_endpoint"
        assert upstream.requests == []

    def test_missing_credential(self) -> None:
        upstream = json_upstream([])
        result = asyncio.run(_proxy(upstream).forward(NOTABLE, None))
        assert result.status_code == 400
        assert result.body["code"] == "missing_credential"
        assert upstream.requests == []

    def test_success_relayed_verbatim(self) -> None:
        upstream = json_upstream(SAMPLE_SIGHTINGS)
        result = asyncio.run(_proxy(upstream).forward(NOTABLE, "abc123", {"back": "7"}))
        assert result.ok
        assert result.status_code == 200
        assert result.body == SAMPLE_SIGHTINGS

    def test_builds_url_and_headers(self) -> None:
        upstream = json_upstream([])
        asyncio.run(
            _proxy(upstream).forward(NOTABLE, "abc123", [("back", "7"), ("hotspot", "true")])
        )
        sent = upstream.last
        assert str(sent.url) == (
            "https://api.ebird.org/v2/data/obs/US-NY/recent/notable?back=7&hotspot=true"
        )
        assert sent.headers[CREDENTIAL_HEADER] == "abc123"
        assert sent.headers["User-Agent"] == "eBird-Rare-Alerts/1.0"

    def test_params_passed_unvalidated(self) -> None:
        upstream = json_upstream([])
        asyncio.run(_proxy(upstream).forward(NOTABLE, "abc123", {"back": "999", "foo": "bar"}))
        assert upstream.last.url.params["back"] == "999"
        assert upstream.last.url.params["foo"] == "bar"

    def test_custom_base_url(self) -> None:
        upstream = json_upstream([])
        proxy = RequestProxy("http://ebird.local/v2/", transport=httpx.MockTransport(upstream))
        asyncio.run(proxy.forward(NOTABLE, "abc123"))
        assert str(upstream.last.url) == "http://ebird.local/v2/data/obs/US-NY/recent/notable"

    def test_upstream_error_normalized(self) -> None:
        upstream = StubUpstream(lambda _r: httpx.Response(429, text="slow down"))
        result = asyncio.run(_proxy(upstream).forward(NOTABLE, "abc123"))
        assert result.status_code == 429
        assert result.body == {
            "error": "eBird API error: 429 Too Many Requests",
            "code": "upstream_status",
            "details": "slow down",
            "status": 429,
            "statusText": "Too Many Requests",
        }

    def test_transport_failure(self) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Name or service not known", request=request)

        result = asyncio.run(_proxy(StubUpstream(refuse)).forward(NOTABLE, "abc123"))
        assert result.status_code == FALLBACK_STATUS == 500
        assert result.body == {
            "error": "Failed to fetch data from eBird API",
            "code": "transport_failure",
        }

    def test_unparseable_success_body(self) -> None:
        upstream = StubUpstream(lambda _r: httpx.Response(200, text="<html>"))
        result = asyncio.run(_proxy(upstream).forward(NOTABLE, "abc123"))
        assert result.status_code == FALLBACK_STATUS
        assert result.body["code"] == "transport_failure"

    def test_no_retries(self) -> None:
        upstream = StubUpstream(lambda _r: httpx.Response(503))
        asyncio.run(_proxy(upstream).forward(NOTABLE, "abc123"))
        assert len(upstream.requests) == 1


# =============================================================================
# FastAPI app
# =============================================================================


class TestProxyApp:
    """The HTTP surface browsers call."""

    @staticmethod
    def _client(upstream: StubUpstream) -> TestClient:
        app = create_app(make_settings(), upstream_transport=httpx.MockTransport(upstream))
        return TestClient(app)

    def test_forwards_params_without_proxy_keys(self) -> None:
        upstream = json_upstream(SAMPLE_SIGHTINGS)
        resp = self._client(upstream).get(
            "/api/ebird",
            params={"endpoint": NOTABLE, "apiKey": "abc123", "back": "7", "hotspot": "true"},
        )
        assert resp.status_code == 200
        assert resp.json() == SAMPLE_SIGHTINGS
        assert dict(upstream.last.url.params) == {"back": "7", "hotspot": "true"}
        assert upstream.last.headers[CREDENTIAL_HEADER] == "abc123"

    def test_missing_endpoint_is_400(self) -> None:
        upstream = json_upstream([])
        resp = self._client(upstream).get("/api/ebird", params={"apiKey": "abc123"})
        assert resp.status_code == 400
        assert resp.json()["error"] == "Endpoint parameter is required"
        assert upstream.requests == []

    def test_missing_key_is_400(self) -> None:
        upstream = json_upstream([])
        resp = self._client(upstream).get("/api/ebird", params={"endpoint": NOTABLE})
        assert resp.status_code == 400
        assert resp.json()["error"] == "API key is required"
        assert upstream.requests == []

    def test_upstream_status_mirrored(self) -> None:
        upstream = StubUpstream(lambda _r: httpx.Response(401, text="bad key"))
        resp = self._client(upstream).get(
            "/api/ebird", params={"endpoint": NOTABLE, "apiKey": "nope"}
        )
        assert resp.status_code == 401
        assert resp.json()["details"] == "bad key"

    def test_health(self) -> None:
        resp = self._client(json_upstream([])).get("/health")
        assert resp.status_code == 200
        assert resp.json() == {
            "status": "ok",
            "service": "rare-bird-alerts",
            "version": __version__,
        }

    def test_access_log_redaction_installed(self) -> None:
        self._client(json_upstream([]))
        access_filters = logging.getLogger("uvicorn.access").filters
        assert any(isinstance(f, CredentialRedactingFilter) for f in access_filters)
