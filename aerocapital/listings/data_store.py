from __future__ import annotations

import json
import logging
import os
import uuid
from datetime import datetime, timezone
from pathlib import Path

import pandas as pd

from ..data_ingestion.config import DEFAULT_INGESTION_CONFIG
from .models import AircraftCreate, AircraftRecord, AircraftUpdate

logger = logging.getLogger(__name__)


class AircraftNotFoundError(LookupError):
    pass


class DuplicateSlugError(ValueError):
    pass


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_features(value: object) -> list[str]:
    if value is None:
        return []
    if isinstance(value, list):
        return [str(v) for v in value]
    raw = str(value).strip()
    if not raw:
        return []
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        return [f.strip() for f in raw.split("|") if f.strip()]
    return [str(v) for v in parsed] if isinstance(parsed, list) else []


_TEXT_COLUMNS = [
    "id",
    "title",
    "slug",
    "status",
    "manufacturer",
    "model",
    "category",
    "registration_number",
    "serial_number",
    "price_currency",
    "description",
    "features",
    "primary_image_url",
]


def load_records(path: Path) -> list[AircraftRecord]:
    """Read the processed aircraft CSV into validated records."""
    # Model names such as "172" must not be inferred as numbers.
    df = pd.read_csv(path, dtype={col: str for col in _TEXT_COLUMNS})
    df = df.astype(object).where(pd.notna(df), None)

    records: list[AircraftRecord] = []
    for row in df.to_dict(orient="records"):
        row["features"] = _parse_features(row.get("features"))
        records.append(AircraftRecord(**row))
    return records


_REQUIRED_FIELDS = {
    "title",
    "slug",
    "status",
    "manufacturer",
    "model",
    "year_manufactured",
    "category",
    "price_currency",
    "is_price_negotiable",
    "features",
    "featured",
}


class AircraftRepository:
    """In-process stand-in for the hosted aircraft table."""

    def __init__(self, records: list[AircraftRecord] | None = None) -> None:
        self._records: dict[str, AircraftRecord] = {}
        for record in records or []:
            self._records[record.id] = record

    def list_all(self, include_deleted: bool = False) -> list[AircraftRecord]:
        """All records, newest first. Soft-deleted rows are hidden by default."""
        rows = [
            r for r in self._records.values()
            if include_deleted or r.deleted_at is None
        ]
        rows.sort(key=lambda r: r.created_at, reverse=True)
        return rows

    def get(self, aircraft_id: str) -> AircraftRecord:
        record = self._records.get(aircraft_id)
        if record is None:
            raise AircraftNotFoundError(aircraft_id)
        return record

    def get_by_slug(self, slug: str) -> AircraftRecord:
        for record in self._records.values():
            if record.slug == slug and record.deleted_at is None:
                return record
        raise AircraftNotFoundError(slug)

    def _ensure_unique_slug(self, slug: str, exclude_id: str | None = None) -> None:
        for record in self._records.values():
            if record.slug == slug and record.id != exclude_id:
                raise DuplicateSlugError(slug)

    def create(self, data: AircraftCreate, created_by: str | None = None) -> AircraftRecord:
        self._ensure_unique_slug(data.slug)
        now = _now()
        record = AircraftRecord(
            id=str(uuid.uuid4()),
            created_by=created_by,
            created_at=now,
            updated_at=now,
            **data.model_dump(),
        )
        self._records[record.id] = record
        logger.info("Created aircraft %s (%s)", record.id, record.slug)
        return record

    def update(self, aircraft_id: str, data: AircraftUpdate) -> AircraftRecord:
        current = self.get(aircraft_id)
        # Required columns cannot be nulled out by a partial update.
        changes = {
            k: v for k, v in data.model_dump(exclude_unset=True).items()
            if v is not None or k not in _REQUIRED_FIELDS
        }
        if changes.get("slug"):
            self._ensure_unique_slug(changes["slug"], exclude_id=aircraft_id)
        merged = current.model_dump()
        merged.update(changes)
        merged["updated_at"] = _now()
        record = AircraftRecord(**merged)
        self._records[aircraft_id] = record
        logger.info("Updated aircraft %s fields=%s", aircraft_id, sorted(changes))
        return record

    def delete(self, aircraft_id: str, soft: bool = True) -> AircraftRecord | None:
        current = self.get(aircraft_id)
        if soft:
            record = current.model_copy(update={"deleted_at": _now(), "updated_at": _now()})
            self._records[aircraft_id] = record
            logger.info("Soft-deleted aircraft %s", aircraft_id)
            return record
        del self._records[aircraft_id]
        logger.info("Hard-deleted aircraft %s", aircraft_id)
        return None

    def increment_views(self, aircraft_id: str) -> AircraftRecord:
        current = self.get(aircraft_id)
        record = current.model_copy(update={"view_count": current.view_count + 1})
        self._records[aircraft_id] = record
        return record

    def clear(self) -> None:
        self._records.clear()


_repository: AircraftRepository | None = None


def _data_path() -> Path:
    override = os.getenv("AIRCRAFT_DATA_PATH")
    return Path(override) if override else DEFAULT_INGESTION_CONFIG.processed_path


def _load() -> AircraftRepository:
    path = _data_path()
    if not path.is_file():
        logger.info("No aircraft data at %s, starting with an empty inventory", path)
        return AircraftRepository()
    records = load_records(path)
    logger.info("Loaded %d aircraft from %s", len(records), path)
    return AircraftRepository(records)


def get_repository() -> AircraftRepository:
    """Return the process aircraft repository, loading it on first call."""
    global _repository
    if _repository is None:
        _repository = _load()
    return _repository
