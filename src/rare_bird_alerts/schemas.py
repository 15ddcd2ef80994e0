"""
Domain models for rare bird alerts.

Pydantic models for the filter the UI submits and the sightings eBird
returns. ``FilterCriteria`` owns the translation to and from eBird query
parameters; ``Sighting`` is a pass-through record the core never
recomputes.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, RootModel, TypeAdapter, field_validator

# =============================================================================
# Filter criteria
# =============================================================================

DEFAULT_REGION = "US"
DEFAULT_DAYS_BACK = 14
MIN_DAYS_BACK = 1
MAX_DAYS_BACK = 30
MAX_RESULTS_CEILING = 10_000
MAX_EXTRA_LOCATIONS = 10
DEFAULT_LOCALE = "en"


class DetailLevel(StrEnum):
    """How much of each observation eBird returns."""

    SIMPLE = "simple"
    FULL = "full"


class FilterCriteria(BaseModel):
    """
    An immutable snapshot of the user's filter.

    A fresh instance is built for every fetch, so a request in flight never
    sees later changes to the UI's filter state.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True, extra="forbid")

    region_code: str = Field(..., min_length=1, description="eBird region or location code")
    days_back: int = Field(default=DEFAULT_DAYS_BACK, ge=MIN_DAYS_BACK, le=MAX_DAYS_BACK)
    detail_level: DetailLevel = DetailLevel.FULL
    hotspot_only: bool = False
    max_results: int | None = Field(default=None, ge=1, le=MAX_RESULTS_CEILING)
    extra_location_codes: str | None = Field(
        default=None, description="Comma-separated location codes, at most 10"
    )
    species_locale: str = Field(default=DEFAULT_LOCALE, min_length=1)

    @field_validator("extra_location_codes")
    @classmethod
    def _normalize_location_codes(cls, value: str | None) -> str | None:
        if value is None:
            return None
        codes = [code.strip() for code in value.split(",") if code.strip()]
        if not codes:
            return None
        if len(codes) > MAX_EXTRA_LOCATIONS:
            raise ValueError(
                f"at most {MAX_EXTRA_LOCATIONS} extra location codes allowed, got {len(codes)}"
            )
        return ",".join(codes)

    @classmethod
    def defaults(cls) -> FilterCriteria:
        """The filter the application starts from and resets to."""
        return cls(region_code=DEFAULT_REGION)

    @classmethod
    def build(
        cls,
        region_code: str,
        criteria: FilterCriteria | Mapping[str, Any] | None = None,
    ) -> FilterCriteria:
        """
        Snapshot ``criteria`` for ``region_code``.

        ``criteria`` may be a full ``FilterCriteria`` or a partial mapping of
        its field names; anything omitted falls back to the defaults.

        Raises:
            pydantic.ValidationError: If a field is out of its domain.
        """
        if isinstance(criteria, FilterCriteria):
            fields = criteria.model_dump()
        else:
            fields = dict(criteria or {})
        fields["region_code"] = region_code
        return cls.model_validate(fields)

    def to_query_params(self) -> dict[str, str]:
        """
        eBird query parameters for the notable-observations endpoint.

        Booleans become the literal strings ``"true"``/``"false"``; optional
        fields are only present when set.
        """
        params = {
            "back": str(self.days_back),
            "detail": self.detail_level.value,
            "hotspot": "true" if self.hotspot_only else "false",
            "sppLocale": self.species_locale,
        }
        if self.max_results is not None:
            params["maxResults"] = str(self.max_results)
        if self.extra_location_codes:
            params["r"] = self.extra_location_codes
        return params

    @classmethod
    def from_query_params(cls, region_code: str, params: Mapping[str, str]) -> FilterCriteria:
        """Inverse of ``to_query_params``."""
        fields: dict[str, Any] = {"region_code": region_code}
        if "back" in params:
            fields["days_back"] = int(params["back"])
        if "detail" in params:
            fields["detail_level"] = params["detail"]
        if "hotspot" in params:
            fields["hotspot_only"] = params["hotspot"] == "true"
        if "maxResults" in params:
            fields["max_results"] = int(params["maxResults"])
        if "r" in params:
            fields["extra_location_codes"] = params["r"]
        if "sppLocale" in params:
            fields["species_locale"] = params["sppLocale"]
        return cls.model_validate(fields)


# =============================================================================
# Sightings
# =============================================================================


class Sighting(RootModel[dict[str, Any]]):
    """
    A notable observation exactly as eBird reports it.

    The record is kept as received: values are never coerced, nulls and
    unknown fields stay put, and ``to_ebird()`` returns the same mapping.
    The properties below read eBird's fields on demand.
    """

    model_config = ConfigDict(frozen=True)

    def get(self, field: str, default: Any = None) -> Any:
        return self.root.get(field, default)

    @property
    def species_code(self) -> Any:
        return self.root.get("speciesCode")

    @property
    def common_name(self) -> Any:
        return self.root.get("comName")

    @property
    def scientific_name(self) -> Any:
        return self.root.get("sciName")

    @property
    def location_id(self) -> Any:
        return self.root.get("locId")

    @property
    def location_name(self) -> Any:
        return self.root.get("locName")

    @property
    def observed_at(self) -> Any:
        return self.root.get("obsDt")

    @property
    def how_many(self) -> Any:
        """Count reported by the observer; absent when only presence was noted."""
        return self.root.get("howMany")

    @property
    def lat(self) -> Any:
        return self.root.get("lat")

    @property
    def lng(self) -> Any:
        return self.root.get("lng")

    @property
    def obs_valid(self) -> Any:
        return self.root.get("obsValid")

    @property
    def obs_reviewed(self) -> Any:
        return self.root.get("obsReviewed")

    @property
    def location_private(self) -> Any:
        return self.root.get("locationPrivate")

    @property
    def subnational1_name(self) -> Any:
        return self.root.get("subnational1Name")

    @property
    def subnational2_name(self) -> Any:
        return self.root.get("subnational2Name")

    @property
    def sub_id(self) -> Any:
        return self.root.get("subId")

    @property
    def obs_id(self) -> Any:
        return self.root.get("obsId")

    @property
    def display_name(self) -> str:
        common, scientific = self.common_name, self.scientific_name
        if common and scientific:
            return f"{common} ({scientific})"
        return str(common or scientific or self.species_code or "Unknown")

    @property
    def marker_key(self) -> str:
        """Stable key for a map marker, built from eBird's opaque identifiers."""
        parts = [self.sub_id, self.obs_id, self.species_code]
        return "-".join(str(p) for p in parts if p)

    def to_ebird(self) -> dict[str, Any]:
        """A copy of the record in eBird's own field names."""
        return dict(self.root)


SIGHTINGS_ADAPTER: TypeAdapter[list[Sighting]] = TypeAdapter(list[Sighting])


def parse_sightings(payload: Any) -> list[Sighting]:
    """
    Parse a success payload as a sequence of sightings, keeping upstream order.

    Only the shape is checked: a list whose items are JSON objects.

    Raises:
        pydantic.ValidationError: If the payload is not a list of objects.
    """
    return SIGHTINGS_ADAPTER.validate_python(payload)
