"""
Aircraft data ingestion package.

Responsibilities:
- Read a hand-maintained JSON list of aircraft.
- Normalize it into the canonical aircraft schema (slugs, defaults, ids).
- Persist the processed inventory locally for the aircraft repository.
"""
