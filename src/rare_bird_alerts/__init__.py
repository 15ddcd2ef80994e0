"""Rare Bird Alerts - notable eBird sightings for a map viewer.

Architecture::

    datasources/ebird/  API client: filter → query translation, error classification
    proxy/              Request proxy: attaches the credential, forwards to eBird
    services/           Shared utilities (async HTTP client factory, redaction)
    schemas.py          FilterCriteria and Sighting models
    errors.py           Error taxonomy surfaced to the UI
    sequencing.py       Stale-result guard for consumers issuing overlapping fetches

Data flow: UI criteria → datasources.ebird client → proxy (HTTP) → eBird API v2
"""

__version__ = "0.1.0"

from rare_bird_alerts.config import Settings
from rare_bird_alerts.schemas import FilterCriteria, Sighting
from rare_bird_alerts.sequencing import LatestResultGate

__all__ = ["FilterCriteria", "LatestResultGate", "Settings", "Sighting", "__version__"]
