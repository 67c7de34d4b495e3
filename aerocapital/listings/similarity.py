from __future__ import annotations

from typing import Iterable

from .models import AircraftRecord, AircraftStatus

DEFAULT_LIMIT = 3

_EXCLUDED_STATUSES = {AircraftStatus.draft, AircraftStatus.sold}


def is_eligible(reference: AircraftRecord, candidate: AircraftRecord) -> bool:
    """A candidate must not be the reference itself, a draft, or already sold."""
    return candidate.id != reference.id and candidate.status not in _EXCLUDED_STATUSES


def score_similarity(reference: AircraftRecord, candidate: AircraftRecord) -> int:
    """Additive similarity score of *candidate* against *reference*."""
    score = 0

    if candidate.category == reference.category:
        score += 10

    if candidate.manufacturer == reference.manufacturer:
        score += 5

    year_diff = abs(candidate.year_manufactured - reference.year_manufactured)
    if year_diff <= 5:
        score += 3
    if year_diff <= 2:
        score += 2

    # Price similarity is relative to the reference; a zero price has no scale.
    if candidate.price and reference.price:
        # Compared as diff * 100 against pct * price so the bounds stay exact.
        scaled_diff = abs(candidate.price - reference.price) * 100
        if scaled_diff <= 20 * reference.price:
            score += 4
        if scaled_diff <= 10 * reference.price:
            score += 2

    if (
        candidate.passengers_capacity
        and reference.passengers_capacity
        and abs(candidate.passengers_capacity - reference.passengers_capacity) <= 2
    ):
        score += 2

    return score


def rank_similar(
    reference: AircraftRecord, records: Iterable[AircraftRecord],
) -> list[tuple[AircraftRecord, int]]:
    """Score every eligible record, highest first; ties keep input order."""
    scored = [
        (aircraft, score_similarity(reference, aircraft))
        for aircraft in records
        if is_eligible(reference, aircraft)
    ]
    scored.sort(key=lambda item: item[1], reverse=True)
    return scored


def similar_aircraft(
    reference: AircraftRecord,
    records: Iterable[AircraftRecord],
    limit: int = DEFAULT_LIMIT,
) -> list[AircraftRecord]:
    if limit <= 0:
        return []
    return [aircraft for aircraft, _ in rank_similar(reference, records)[:limit]]
