"""
Pytest configuration and shared fixtures.

Every test gets a fresh aircraft repository, inquiry store, rate limiter and
event log so module-level TestClients can be shared safely.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from aerocapital.analytics.store import clear_events
from aerocapital.app import app
from aerocapital.inquiries.notifier import EmailNotifier, get_notifier
from aerocapital.inquiries.store import get_inquiry_store
from aerocapital.listings.data_store import AircraftRepository, get_repository
from aerocapital.listings.models import AircraftRecord
from aerocapital.ratelimit.limiter import get_rate_limiter

_BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _build(index: int, **overrides) -> AircraftRecord:
    data = {
        "id": f"ac-{index}",
        "title": f"Test Aircraft {index}",
        "slug": f"test-aircraft-{index}",
        "status": "available",
        "manufacturer": "Cessna",
        "model": "Citation",
        "year_manufactured": 2015,
        "category": "jet",
        "price": 1_000_000.0,
        "created_at": _BASE_TIME + timedelta(days=index),
    }
    data.update(overrides)
    return AircraftRecord(**data)


@pytest.fixture
def make_aircraft():
    """Factory for AircraftRecord with sensible defaults."""
    counter = {"n": 0}

    def _make(**overrides) -> AircraftRecord:
        counter["n"] += 1
        return _build(counter["n"], **overrides)

    return _make


@pytest.fixture
def inventory() -> list[AircraftRecord]:
    """A small mixed inventory covering every status and several categories."""
    return [
        _build(1, title="Citation CJ3 Business Jet", slug="citation-cj3",
               manufacturer="Cessna", model="CJ3", year_manufactured=2018,
               price=6_500_000.0, passengers_capacity=7, featured=True),
        _build(2, title="Citation CJ4", slug="citation-cj4",
               manufacturer="Cessna", model="CJ4", year_manufactured=2019,
               price=7_000_000.0, passengers_capacity=8),
        _build(3, title="King Air 350", slug="king-air-350", category="turboprop",
               manufacturer="Beechcraft", model="350", year_manufactured=2012,
               price=None, description="Contact for price"),
        _build(4, title="Bell 407 Helicopter", slug="bell-407", category="helicopter",
               manufacturer="Bell", model="407", year_manufactured=2010,
               price=2_500_000.0, status="pending"),
        _build(5, title="Piper Archer", slug="piper-archer", category="piston",
               manufacturer="Piper", model="Archer", year_manufactured=2005,
               price=350_000.0, status="sold"),
        _build(6, title="Unpublished Phenom", slug="unpublished-phenom",
               manufacturer="Embraer", model="Phenom 300", year_manufactured=2020,
               price=9_000_000.0, status="draft"),
    ]


@pytest.fixture
def repository(inventory) -> AircraftRepository:
    return AircraftRepository(inventory)


@pytest.fixture
def notifier() -> MagicMock:
    return MagicMock(spec=EmailNotifier)


@pytest.fixture(autouse=True)
def _isolated_app(repository, notifier):
    app.dependency_overrides[get_repository] = lambda: repository
    app.dependency_overrides[get_notifier] = lambda: notifier
    get_rate_limiter().store.clear()
    get_inquiry_store().clear()
    clear_events()
    yield
    app.dependency_overrides.clear()
