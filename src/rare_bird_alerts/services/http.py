"""
Shared async HTTP client factory.

Both hops (client → proxy, proxy → eBird) use ``httpx.AsyncClient`` built
here so they agree on headers and timeout policy.  No retries are mounted:
failures surface to the caller, which decides what to do.

Request URLs on the client → proxy hop carry the credential as ``apiKey``;
``install_log_redaction()`` keeps httpx and the uvicorn access log from
writing it out in full.

Usage::

    from rare_bird_alerts.services.http import create_client

    async with create_client(base_url="http://127.0.0.1:8000") as client:
        resp = await client.get("/api/ebird", params={...})
"""

from __future__ import annotations

import logging
import re

import httpx

#: Identifies this application to the upstream service.
DEFAULT_CLIENT_AGENT = "eBird-Rare-Alerts/1.0"

#: No timeout: a hung upstream shows up as a pending task the caller may bound.
DEFAULT_TIMEOUT: float | None = None

REDACTED_PREFIX_LENGTH = 8


def create_client(
    *,
    base_url: str = "",
    timeout: float | None = DEFAULT_TIMEOUT,
    client_agent: str = DEFAULT_CLIENT_AGENT,
    headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """
    Build an ``httpx.AsyncClient`` with the application's defaults.

    Args:
        base_url: Prefix for relative request URLs.
        timeout: Seconds before a request is abandoned; ``None`` waits forever.
        client_agent: ``User-Agent`` header value.
        headers: Extra default headers.
        transport: Custom transport (tests inject ``httpx.MockTransport`` or
            ``httpx.ASGITransport`` here).
    """
    install_log_redaction()
    default_headers = {"User-Agent": client_agent, "Accept": "application/json"}
    default_headers.update(headers or {})
    return httpx.AsyncClient(
        base_url=base_url,
        timeout=httpx.Timeout(timeout),
        headers=default_headers,
        transport=transport,
    )


def redact(secret: str | None) -> str:
    """Short, non-secret rendering of a credential for diagnostics."""
    if not secret:
        return "not set"
    return f"{secret[:REDACTED_PREFIX_LENGTH]}..."


# =============================================================================
# Log redaction
# =============================================================================

#: Third-party loggers that write request URLs, which carry ``apiKey=``.
URL_LOGGERS = ("httpx", "uvicorn.access")

_CREDENTIAL_IN_QUERY = re.compile(r"(apiKey=)([^&\s\"']+)")


def redact_query(text: str) -> str:
    """Replace every ``apiKey=`` value in ``text`` with its redacted form."""
    return _CREDENTIAL_IN_QUERY.sub(lambda m: m.group(1) + redact(m.group(2)), text)


class CredentialRedactingFilter(logging.Filter):
    """Rewrites ``apiKey=`` query values in a record before any handler sees it."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = redact_query(record.msg)
        if isinstance(record.args, tuple):
            record.args = tuple(_scrub(arg) for arg in record.args)
        return True


def _scrub(value: object) -> object:
    if isinstance(value, str | httpx.URL):
        text = str(value)
        if "apiKey=" in text:
            return redact_query(text)
    return value


def install_log_redaction() -> None:
    """Attach ``CredentialRedactingFilter`` to the URL-logging loggers once."""
    for name in URL_LOGGERS:
        target = logging.getLogger(name)
        if not any(isinstance(f, CredentialRedactingFilter) for f in target.filters):
            target.addFilter(CredentialRedactingFilter())
