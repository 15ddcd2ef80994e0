"""Notable-observation fetching through the request proxy.

``EBirdApiClient`` is what the UI talks to. It holds the session credential,
turns filter criteria into eBird query parameters, calls the proxy and
classifies whatever went wrong into an ``ErrorKind``.  Failures come back as
values (``FetchFailure``), never as exceptions.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, ClassVar

import httpx

from rare_bird_alerts.datasources.ebird import client
from rare_bird_alerts.errors import (
    PROXY_CODE_MISSING_CREDENTIAL,
    PROXY_CODE_MISSING_ENDPOINT,
    PROXY_CODE_TRANSPORT_FAILURE,
    ApiError,
    ErrorKind,
    classify_status,
)
from rare_bird_alerts.schemas import FilterCriteria, Sighting, parse_sightings
from rare_bird_alerts.services.http import create_client, redact

logger = logging.getLogger(__name__)

MISSING_CREDENTIAL_MESSAGE = "API key is required. Please add your eBird API key."

# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True)
class FetchSuccess:
    """Sightings in the order eBird returned them."""

    request_id: int
    criteria: FilterCriteria
    sightings: list[Sighting] = field(default_factory=list)

    ok: ClassVar[bool] = True


@dataclass(frozen=True)
class FetchFailure:
    """A classified failure for one fetch."""

    request_id: int
    criteria: FilterCriteria
    error: ApiError

    ok: ClassVar[bool] = False

    @property
    def kind(self) -> ErrorKind:
        return self.error.kind


FetchResult = FetchSuccess | FetchFailure


# =============================================================================
# Client
# =============================================================================


class EBirdApiClient:
    """
    Session-scoped eBird client.

    Each instance owns its own credential and request counter, so several
    clients can run side by side (one per browser session, or per test).
    """

    def __init__(
        self,
        proxy_url: str = client.DEFAULT_PROXY_URL,
        *,
        proxy_path: str = client.PROXY_PATH,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.proxy_url = proxy_url.rstrip("/")
        self.proxy_path = proxy_path
        self.timeout = timeout
        self._transport = transport
        self._credential: str | None = None
        self._sequence = itertools.count(1)

    # -------------------------------------------------------------------------
    # Credential
    # -------------------------------------------------------------------------

    def set_credential(self, secret: str) -> None:
        """Replace the session credential. Validation is a separate call."""
        if not secret:
            raise ValueError("credential must be a non-empty string")
        self._credential = secret
        logger.debug("Credential set: %s", redact(secret))

    @property
    def has_credential(self) -> bool:
        return self._credential is not None

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def fetch_notable_observations(
        self,
        region_code: str,
        criteria: FilterCriteria | Mapping[str, Any] | None = None,
    ) -> FetchResult:
        """
        Recent notable observations for ``region_code``.

        Args:
            region_code: eBird region or location code, e.g. ``US-NY``.
            criteria: Full criteria or a partial mapping of field names;
                omitted fields use the defaults (14 days back, full detail,
                any location, English names).

        Returns:
            ``FetchSuccess`` or ``FetchFailure``. Both carry a ``request_id``
            that increases with every call on this client, plus the criteria
            snapshot the request was built from.

        Raises:
            pydantic.ValidationError: If ``criteria`` is out of its domain.
        """
        request_id = next(self._sequence)
        snapshot = FilterCriteria.build(region_code, criteria)
        outcome = await self._call(
            client.notable_observations_path(snapshot.region_code),
            snapshot.to_query_params(),
        )
        if isinstance(outcome, ApiError):
            logger.warning("Fetch #%d for %s failed: %s", request_id, region_code, outcome)
            return FetchFailure(request_id, snapshot, outcome)
        logger.info("Fetch #%d for %s returned %d sightings", request_id, region_code, len(outcome))
        return FetchSuccess(request_id, snapshot, outcome)

    async def validate_credential(self) -> bool:
        """
        Probe eBird with the current credential.

        Returns True only if the probe comes back 2xx with a list payload
        (an empty list counts). Never raises.
        """
        logger.debug("Validating credential %s", redact(self._credential))
        try:
            outcome = await self._call(
                client.notable_observations_path(client.BASELINE_REGION),
                client.PROBE_PARAMS,
            )
        except Exception:
            logger.exception("Credential validation failed unexpectedly")
            return False
        if isinstance(outcome, ApiError):
            logger.info("Credential validation failed: %s", outcome)
            return False
        return True

    # -------------------------------------------------------------------------
    # Transport + classification
    # -------------------------------------------------------------------------

    async def _call(self, endpoint: str, params: Mapping[str, str]) -> list[Sighting] | ApiError:
        """One round trip through the proxy."""
        credential = self._credential
        if not credential:
            return ApiError(ErrorKind.MISSING_CREDENTIAL, MISSING_CREDENTIAL_MESSAGE)

        query = [
            (client.ENDPOINT_PARAM, endpoint),
            (client.CREDENTIAL_PARAM, credential),
            *params.items(),
        ]
        logger.debug(
            "GET %s endpoint=%s params=%s key=%s",
            self.proxy_path,
            endpoint,
            dict(params),
            redact(credential),
        )

        try:
            async with create_client(
                base_url=self.proxy_url, timeout=self.timeout, transport=self._transport
            ) as http:
                response = await http.get(self.proxy_path, params=query)
        except httpx.HTTPError as exc:
            return ApiError(
                ErrorKind.TRANSPORT_FAILURE,
                f"Could not reach the eBird proxy: {exc!r}",
            )

        if response.is_success:
            return _parse_success(response)
        return _classify_failure(response)


def _parse_success(response: httpx.Response) -> list[Sighting] | ApiError:
    try:
        return parse_sightings(response.json())
    except ValueError:
        return ApiError(
            ErrorKind.UPSTREAM_ERROR,
            "eBird returned an unexpected payload",
            status=response.status_code,
            details=response.text[:400],
        )


def _classify_failure(response: httpx.Response) -> ApiError:
    """Turn a non-2xx proxy response into an ``ApiError``."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if not isinstance(body, dict):
        body = {}

    message = str(body.get("error") or response.reason_phrase)
    code = body.get("code")
    if code == PROXY_CODE_TRANSPORT_FAILURE:
        return ApiError(ErrorKind.TRANSPORT_FAILURE, message, status=response.status_code)
    if code == PROXY_CODE_MISSING_ENDPOINT:
        return ApiError(ErrorKind.MISSING_ENDPOINT, message, status=response.status_code)
    if code == PROXY_CODE_MISSING_CREDENTIAL:
        return ApiError(ErrorKind.MISSING_CREDENTIAL, message, status=response.status_code)

    details = body.get("details")
    if details is None and not body:
        details = response.text or None
    return classify_status(
        response.status_code,
        reason=str(body.get("statusText") or response.reason_phrase),
        details=details,
    )
