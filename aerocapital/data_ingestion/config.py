"""Paths and defaults for the aircraft JSON import."""

from dataclasses import dataclass
from pathlib import Path

_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


@dataclass(frozen=True)
class IngestionConfig:
    """
    Configuration for the aircraft JSON import.
    """

    source_path: Path = _DATA_DIR / "raw" / "aircraft.json"
    processed_data_dir: Path = _DATA_DIR / "processed"
    processed_filename: str = "aircraft.csv"
    default_category: str = "jet"
    default_status: str = "available"
    default_currency: str = "USD"

    @property
    def processed_path(self) -> Path:
        return self.processed_data_dir / self.processed_filename


DEFAULT_INGESTION_CONFIG = IngestionConfig()
