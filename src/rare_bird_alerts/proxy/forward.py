"""
Request forwarding to the eBird API.

The proxy is a stateless hop: it attaches the credential as a header,
forwards the call and relays what came back. It preserves upstream status
codes so the API client can classify them, and never interprets rate-limit
or auth semantics itself.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

import httpx

from rare_bird_alerts.errors import (
    PROXY_CODE_MISSING_CREDENTIAL,
    PROXY_CODE_MISSING_ENDPOINT,
    PROXY_CODE_TRANSPORT_FAILURE,
    PROXY_CODE_UPSTREAM_STATUS,
)
from rare_bird_alerts.services.http import DEFAULT_CLIENT_AGENT, create_client, redact

logger = logging.getLogger(__name__)

EBIRD_API_BASE = "https://api.ebird.org/v2"
CREDENTIAL_HEADER = "X-eBirdApiToken"

#: Status reported when the proxy itself could not get a response.
FALLBACK_STATUS = 500

Params = Mapping[str, str] | Iterable[tuple[str, str]]


@dataclass(frozen=True)
class ProxyResponse:
    """What the proxy sends back: a status and a JSON-serializable body."""

    status_code: int
    body: Any = field(default=None)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


def _error(status: int, message: str, code: str, /, **extra: Any) -> ProxyResponse:
    body: dict[str, Any] = {"error": message, "code": code}
    body.update({k: v for k, v in extra.items() if v is not None})
    return ProxyResponse(status, body)


class RequestProxy:
    """Forwards calls to eBird with the credential attached as a header."""

    def __init__(
        self,
        base_url: str = EBIRD_API_BASE,
        *,
        client_agent: str = DEFAULT_CLIENT_AGENT,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.client_agent = client_agent
        self.timeout = timeout
        self._transport = transport

    async def forward(
        self,
        endpoint_path: str | None,
        credential: str | None,
        extra_params: Params | None = None,
    ) -> ProxyResponse:
        """
        Forward one GET to ``base_url + endpoint_path``.

        Args:
            endpoint_path: Upstream resource path, e.g. ``/data/obs/US/recent/notable``.
            credential: eBird API token, sent as ``X-eBirdApiToken``.
            extra_params: Query parameters passed through unmodified.

        Returns:
            The upstream body and status on success; a normalized error body
            carrying the upstream status otherwise; a generic failure with
            ``FALLBACK_STATUS`` if no response arrived at all.
        """
        if not endpoint_path:
            return _error(400, "Endpoint parameter is required", PROXY_CODE_MISSING_ENDPOINT)
        if not credential:
            return _error(400, "API key is required", PROXY_CODE_MISSING_CREDENTIAL)

        url = f"{self.base_url}{endpoint_path}"
        if isinstance(extra_params, Mapping):
            params = list(extra_params.items())
        else:
            params = list(extra_params or [])
        logger.debug("Forwarding GET %s params=%s key=%s", url, params, redact(credential))

        try:
            async with create_client(
                timeout=self.timeout,
                client_agent=self.client_agent,
                headers={CREDENTIAL_HEADER: credential},
                transport=self._transport,
            ) as client:
                response = await client.get(url, params=params)
                if not response.is_success:
                    logger.error("eBird API error: %s %s", response.status_code, response.text)
                    return _error(
                        response.status_code,
                        f"eBird API error: {response.status_code} {response.reason_phrase}",
                        PROXY_CODE_UPSTREAM_STATUS,
                        details=response.text,
                        status=response.status_code,
                        statusText=response.reason_phrase,
                    )
                return ProxyResponse(response.status_code, response.json())
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Proxy error for %s: %r", url, exc)
            return _error(
                FALLBACK_STATUS,
                "Failed to fetch data from eBird API",
                PROXY_CODE_TRANSPORT_FAILURE,
            )
