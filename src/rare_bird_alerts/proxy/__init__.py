"""Request proxy: attaches the eBird credential and forwards calls upstream.

Public API:
  - forward: RequestProxy, ProxyResponse, EBIRD_API_BASE, FALLBACK_STATUS
  - app: create_app (FastAPI application serving the proxy path)
"""

from rare_bird_alerts.proxy.app import create_app
from rare_bird_alerts.proxy.forward import (
    CREDENTIAL_HEADER,
    EBIRD_API_BASE,
    FALLBACK_STATUS,
    ProxyResponse,
    RequestProxy,
)

__all__ = [
    "CREDENTIAL_HEADER",
    "EBIRD_API_BASE",
    "FALLBACK_STATUS",
    "ProxyResponse",
    "RequestProxy",
    "create_app",
]
