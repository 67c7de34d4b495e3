"""
Aircraft listings.

Responsibilities:
- Define the canonical AircraftRecord schema and the public filter state.
- Filter, sort and paginate the in-memory aircraft collection.
- Rank "similar aircraft" recommendations for a detail page.
- Hold the aircraft repository standing in for the hosted database.
"""
