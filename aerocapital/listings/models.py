from __future__ import annotations

import re
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field, field_validator

_SLUG_RE = re.compile(r"^[a-z0-9-]+$")


class AircraftCategory(str, Enum):
    jet = "jet"
    turboprop = "turboprop"
    helicopter = "helicopter"
    piston = "piston"
    trailer = "trailer"

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self]


class AircraftStatus(str, Enum):
    available = "available"
    pending = "pending"
    sold = "sold"
    draft = "draft"

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]


class SortKey(str, Enum):
    newest = "newest"
    price_asc = "price-asc"
    price_desc = "price-desc"
    year_desc = "year-desc"
    year_asc = "year-asc"


CATEGORY_LABELS: dict[AircraftCategory, str] = {
    AircraftCategory.jet: "Business Jet",
    AircraftCategory.turboprop: "Turboprop",
    AircraftCategory.helicopter: "Helicopter",
    AircraftCategory.piston: "Piston Aircraft",
    AircraftCategory.trailer: "Trailer",
}

STATUS_LABELS: dict[AircraftStatus, str] = {
    AircraftStatus.available: "Available",
    AircraftStatus.pending: "Pending",
    AircraftStatus.sold: "Sold",
    AircraftStatus.draft: "Draft",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _max_year() -> int:
    return datetime.now(timezone.utc).year + 1


class AircraftRecord(BaseModel):
    id: str
    title: str
    slug: str
    status: AircraftStatus = AircraftStatus.available
    manufacturer: str
    model: str
    year_manufactured: int
    category: AircraftCategory
    registration_number: str | None = None
    serial_number: str | None = None
    total_time_hours: float | None = None
    engines: int | None = None
    passengers_capacity: int | None = None
    max_range_nm: float | None = None
    max_speed_kts: float | None = None
    cruise_speed_kts: float | None = None
    max_altitude_ft: float | None = None
    price: float | None = Field(default=None, ge=0)
    price_currency: str = "USD"
    is_price_negotiable: bool = False
    description: str | None = None
    features: list[str] = Field(default_factory=list)
    primary_image_url: str | None = None
    featured: bool = False
    view_count: int = 0
    created_by: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
    deleted_at: datetime | None = None


class _AircraftFields(BaseModel):
    """Field rules shared by the admin create and update payloads."""

    @field_validator("slug", check_fields=False)
    @classmethod
    def slug_is_url_safe(cls, v: str | None) -> str | None:
        if v is not None and not _SLUG_RE.match(v):
            raise ValueError(
                "Slug must contain only lowercase letters, numbers, and hyphens"
            )
        return v

    @field_validator("year_manufactured", check_fields=False)
    @classmethod
    def year_not_in_future(cls, v: int | None) -> int | None:
        if v is not None and v > _max_year():
            raise ValueError(f"Year must be {_max_year()} or earlier")
        return v


class AircraftCreate(_AircraftFields):
    title: str = Field(..., min_length=5)
    slug: str = Field(..., min_length=3)
    status: AircraftStatus = AircraftStatus.draft
    manufacturer: str = Field(..., min_length=2)
    model: str = Field(..., min_length=1)
    year_manufactured: int = Field(..., ge=1900)
    category: AircraftCategory
    registration_number: str | None = None
    serial_number: str | None = None
    total_time_hours: float | None = Field(default=None, ge=0)
    engines: int | None = Field(default=None, ge=1, le=8)
    passengers_capacity: int | None = Field(default=None, ge=1, le=1000)
    max_range_nm: float | None = Field(default=None, ge=0)
    max_speed_kts: float | None = Field(default=None, ge=0)
    cruise_speed_kts: float | None = Field(default=None, ge=0)
    max_altitude_ft: float | None = Field(default=None, ge=0)
    price: float | None = Field(default=None, ge=0)
    price_currency: str = "USD"
    is_price_negotiable: bool = False
    description: str | None = None
    features: list[str] = Field(default_factory=list)
    primary_image_url: str | None = None
    featured: bool = False


class AircraftUpdate(_AircraftFields):
    title: str | None = Field(default=None, min_length=5)
    slug: str | None = Field(default=None, min_length=3)
    status: AircraftStatus | None = None
    manufacturer: str | None = Field(default=None, min_length=2)
    model: str | None = Field(default=None, min_length=1)
    year_manufactured: int | None = Field(default=None, ge=1900)
    category: AircraftCategory | None = None
    registration_number: str | None = None
    serial_number: str | None = None
    total_time_hours: float | None = Field(default=None, ge=0)
    engines: int | None = Field(default=None, ge=1, le=8)
    passengers_capacity: int | None = Field(default=None, ge=1, le=1000)
    max_range_nm: float | None = Field(default=None, ge=0)
    max_speed_kts: float | None = Field(default=None, ge=0)
    cruise_speed_kts: float | None = Field(default=None, ge=0)
    max_altitude_ft: float | None = Field(default=None, ge=0)
    price: float | None = Field(default=None, ge=0)
    price_currency: str | None = None
    is_price_negotiable: bool | None = None
    description: str | None = None
    features: list[str] | None = None
    primary_image_url: str | None = None
    featured: bool | None = None


class FilterState(BaseModel):
    search: str = ""
    categories: list[AircraftCategory] = Field(default_factory=list)
    statuses: list[AircraftStatus] = Field(default_factory=list)
    min_price: float | None = Field(default=None, ge=0)
    max_price: float | None = Field(default=None, ge=0)
    min_year: int | None = None
    max_year: int | None = None
    sort_by: SortKey = SortKey.newest

    def active_filters(self) -> list[str]:
        """Names of the user-controlled filters that are currently set."""
        active: list[str] = []
        if self.search.strip():
            active.append("search")
        if self.categories:
            active.append("category")
        if self.statuses:
            active.append("status")
        if self.min_price is not None or self.max_price is not None:
            active.append("price")
        if self.min_year is not None or self.max_year is not None:
            active.append("year")
        return active


class ListingPage(BaseModel):
    items: list[AircraftRecord]
    total: int
    page: int
    page_size: int
    total_pages: int


class SimilarAircraftResponse(BaseModel):
    reference_id: str
    items: list[AircraftRecord]
