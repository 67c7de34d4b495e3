from __future__ import annotations

import json
import logging
import re
import sys
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List

import pandas as pd

from .config import DEFAULT_INGESTION_CONFIG, IngestionConfig

logger = logging.getLogger(__name__)


CANONICAL_COLUMNS: List[str] = [
    "id",
    "title",
    "slug",
    "status",
    "manufacturer",
    "model",
    "year_manufactured",
    "category",
    "registration_number",
    "serial_number",
    "total_time_hours",
    "engines",
    "passengers_capacity",
    "max_range_nm",
    "max_speed_kts",
    "cruise_speed_kts",
    "max_altitude_ft",
    "price",
    "price_currency",
    "is_price_negotiable",
    "description",
    "features",
    "primary_image_url",
    "featured",
    "created_at",
]

REQUIRED_COLUMNS: List[str] = ["title", "manufacturer", "model", "year_manufactured"]

NUMERIC_COLUMNS: List[str] = [
    "year_manufactured",
    "total_time_hours",
    "engines",
    "passengers_capacity",
    "max_range_nm",
    "max_speed_kts",
    "cruise_speed_kts",
    "max_altitude_ft",
    "price",
]

PASSTHROUGH_COLUMNS: List[str] = [
    "registration_number",
    "serial_number",
    "total_time_hours",
    "engines",
    "passengers_capacity",
    "max_range_nm",
    "max_speed_kts",
    "cruise_speed_kts",
    "max_altitude_ft",
    "price",
    "description",
    "primary_image_url",
]

_VALID_CATEGORIES = {"jet", "turboprop", "helicopter", "piston", "trailer"}
_VALID_STATUSES = {"available", "pending", "sold", "draft"}


def slugify(title: str) -> str:
    """Lowercase *title* and collapse every non-alphanumeric run into a hyphen."""
    return re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")


def _unique_slugs(slugs: pd.Series) -> pd.Series:
    taken: set[str] = set()
    result: list[str] = []
    for slug in slugs:
        candidate, suffix = slug, 1
        while candidate in taken:
            suffix += 1
            candidate = f"{slug}-{suffix}"
        taken.add(candidate)
        result.append(candidate)
    return pd.Series(result, index=slugs.index)


def _normalize_choice(value: object, allowed: set[str], default: str) -> str:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return default
    normalized = str(value).strip().lower()
    return normalized if normalized in allowed else default


def _encode_features(value: object) -> str:
    if isinstance(value, (list, tuple)):
        return json.dumps([str(v) for v in value])
    return "[]"


def _read_source(path: Path) -> pd.DataFrame:
    with path.open(encoding="utf-8") as fh:
        raw = json.load(fh)
    if not isinstance(raw, list):
        raise ValueError(f"{path} must contain a JSON list of aircraft")
    return pd.DataFrame(raw)


def normalize_aircraft(
    df: pd.DataFrame, config: IngestionConfig = DEFAULT_INGESTION_CONFIG,
) -> pd.DataFrame:
    """Map raw import rows onto the canonical aircraft columns."""
    df = df.copy()
    for col in CANONICAL_COLUMNS:
        if col not in df.columns:
            df[col] = None

    for col in NUMERIC_COLUMNS:
        df[col] = pd.to_numeric(df[col], errors="coerce")

    # Rows missing identity fields cannot be listed.
    complete = df[REQUIRED_COLUMNS].notna().all(axis=1)
    complete &= df["title"].astype(str).str.strip() != ""
    skipped = int((~complete).sum())
    if skipped:
        logger.warning("Skipping %d aircraft rows with missing required fields", skipped)
    df = df.loc[complete].reset_index(drop=True)

    # A zero price means "contact for price", same as no price at all.
    df.loc[df["price"] <= 0, "price"] = None

    canonical = pd.DataFrame()
    canonical["id"] = [str(uuid.uuid4()) for _ in range(len(df))]
    canonical["title"] = df["title"].astype(str).str.strip()
    canonical["slug"] = _unique_slugs(canonical["title"].apply(slugify))
    canonical["status"] = df["status"].apply(
        _normalize_choice, allowed=_VALID_STATUSES, default=config.default_status,
    )
    canonical["manufacturer"] = df["manufacturer"].astype(str).str.strip()
    canonical["model"] = df["model"].astype(str).str.strip()
    canonical["year_manufactured"] = df["year_manufactured"].astype(int)
    canonical["category"] = df["category"].apply(
        _normalize_choice, allowed=_VALID_CATEGORIES, default=config.default_category,
    )
    for col in PASSTHROUGH_COLUMNS:
        canonical[col] = df[col]

    canonical["price_currency"] = df["price_currency"].fillna(config.default_currency)
    canonical["is_price_negotiable"] = (
        df["is_price_negotiable"].astype("boolean").fillna(True).astype(bool)
    )
    canonical["featured"] = df["featured"].astype("boolean").fillna(False).astype(bool)
    canonical["features"] = df["features"].apply(_encode_features)

    # Preserve file order as creation order: the first entry is the newest.
    now = datetime.now(timezone.utc)
    canonical["created_at"] = [
        (now - timedelta(seconds=i)).isoformat() for i in range(len(df))
    ]

    return canonical[CANONICAL_COLUMNS]


def run_ingestion(config: IngestionConfig = DEFAULT_INGESTION_CONFIG) -> Path:
    """
    Execute the aircraft import.

    Steps:
    - Read the JSON list of aircraft.
    - Map raw fields into the canonical aircraft schema.
    - Persist cleaned data as CSV for the aircraft repository.
    """
    config.processed_data_dir.mkdir(parents=True, exist_ok=True)

    df = _read_source(config.source_path)
    canonical = normalize_aircraft(df, config)

    output_path = config.processed_path
    canonical.to_csv(output_path, index=False)
    logger.info("Imported %d of %d aircraft into %s", len(canonical), len(df), output_path)
    return output_path


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    cfg = DEFAULT_INGESTION_CONFIG
    if len(sys.argv) > 1:
        cfg = IngestionConfig(source_path=Path(sys.argv[1]))
    path = run_ingestion(cfg)
    print(f"Import complete. Processed data saved to: {path}")
