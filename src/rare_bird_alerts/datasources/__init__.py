"""External data source integrations.

Each subdirectory is one data source:

    datasources/{name}/
    ├── __init__.py       # Public API re-exports
    ├── client.py         # Endpoint paths and constants
    └── {feature}.py      # Typed operations (one per endpoint/concept)

Only eBird is wired today (``ebird/``). Requests go through the proxy in
``rare_bird_alerts.proxy``, which owns the upstream base URL and headers.
"""
