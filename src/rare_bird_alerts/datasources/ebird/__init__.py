"""eBird notable-observation data source.

Public API:
  - client: endpoint paths, proxy path, probe parameters
  - notable: EBirdApiClient, FetchSuccess, FetchFailure, FetchResult
"""

from rare_bird_alerts.datasources.ebird.client import (
    BASELINE_REGION,
    PROXY_PATH,
    notable_observations_path,
)
from rare_bird_alerts.datasources.ebird.notable import (
    EBirdApiClient,
    FetchFailure,
    FetchResult,
    FetchSuccess,
)

__all__ = [
    "BASELINE_REGION",
    "PROXY_PATH",
    "EBirdApiClient",
    "FetchFailure",
    "FetchResult",
    "FetchSuccess",
    "notable_observations_path",
]
