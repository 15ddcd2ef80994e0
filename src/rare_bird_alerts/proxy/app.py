"""
FastAPI application exposing the request proxy.

Run locally:
    rare-bird-alerts serve

Browser-side callers hit ``GET /api/ebird?endpoint=...&apiKey=...&<params>``;
``endpoint`` and ``apiKey`` are consumed here and every other query
parameter is forwarded to eBird unchanged.
"""

from __future__ import annotations

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from rare_bird_alerts import __version__
from rare_bird_alerts.config import Settings, get_settings
from rare_bird_alerts.datasources.ebird.client import CREDENTIAL_PARAM, ENDPOINT_PARAM
from rare_bird_alerts.proxy.forward import RequestProxy
from rare_bird_alerts.services.http import install_log_redaction


def create_app(
    settings: Settings | None = None,
    *,
    upstream_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """
    Build the proxy application.

    Args:
        settings: Configuration (defaults to ``get_settings()``).
        upstream_transport: Transport for the eBird leg; tests pass an
            ``httpx.MockTransport`` to stand in for eBird.
    """
    settings = settings or get_settings()
    install_log_redaction()
    app = FastAPI(
        title="Rare Bird Alerts proxy",
        description="Forwards eBird API calls with the credential attached as a header.",
        version=__version__,
    )
    app.state.settings = settings
    app.state.proxy = RequestProxy(
        settings.ebird_api_base,
        client_agent=settings.client_agent,
        timeout=settings.request_timeout,
        transport=upstream_transport,
    )

    @app.get(settings.proxy_path, summary="Forward a GET to the eBird API")
    async def forward_to_ebird(request: Request) -> JSONResponse:
        query = request.query_params
        extra = [
            (key, value)
            for key, value in query.multi_items()
            if key not in (ENDPOINT_PARAM, CREDENTIAL_PARAM)
        ]
        proxy: RequestProxy = request.app.state.proxy
        result = await proxy.forward(query.get(ENDPOINT_PARAM), query.get(CREDENTIAL_PARAM), extra)
        return JSONResponse(content=result.body, status_code=result.status_code)

    @app.get("/health", summary="Service status")
    async def health() -> dict[str, str]:
        return {"status": "ok", "service": settings.app_name, "version": __version__}

    return app
