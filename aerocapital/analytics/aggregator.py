from __future__ import annotations

from collections import Counter
from typing import Any, Iterable

from ..inquiries.models import Inquiry, InquiryStatus
from ..listings.models import AircraftCategory, AircraftRecord, AircraftStatus


def _rate(part: int, total: int) -> float:
    return round(part / total * 100, 1) if total else 0.0


def compute_dashboard(
    aircraft: Iterable[AircraftRecord],
    inquiries: Iterable[Inquiry],
    events: list[dict[str, Any]],
) -> dict[str, Any]:
    aircraft = list(aircraft)
    inquiries = list(inquiries)

    # Inventory
    by_status = Counter(a.status.value for a in aircraft)
    by_category = Counter(a.category.value for a in aircraft)
    inventory = {
        "total": len(aircraft),
        "by_status": {s.value: by_status.get(s.value, 0) for s in AircraftStatus},
        "by_category": {c.value: by_category.get(c.value, 0) for c in AircraftCategory},
        "featured": sum(1 for a in aircraft if a.featured),
        "total_views": sum(a.view_count for a in aircraft),
    }

    # Inquiries
    inquiry_status = Counter(i.status.value for i in inquiries)
    inquiry_types = Counter(i.inquiry_type.value for i in inquiries)
    inquiry_summary = {
        "total": len(inquiries),
        "new": inquiry_status.get(InquiryStatus.new.value, 0),
        "by_status": {s.value: inquiry_status.get(s.value, 0) for s in InquiryStatus},
        "by_type": dict(inquiry_types),
    }

    # Listing searches
    searches = [e for e in events if e["type"] == "search"]
    total = len(searches)

    term_counter: Counter[str] = Counter()
    for s in searches:
        term = (s.get("search") or "").strip().lower()
        if term:
            term_counter[term] += 1
    top_search_terms = [{"name": n, "count": c} for n, c in term_counter.most_common(10)]

    category_counter: Counter[str] = Counter()
    for s in searches:
        for c in s.get("categories", []) or []:
            category_counter[c] += 1
    top_categories = [{"name": n, "count": c} for n, c in category_counter.most_common(10)]

    filter_counts = {"search": 0, "category": 0, "status": 0, "price": 0, "year": 0}
    for s in searches:
        for name in s.get("active_filters", []) or []:
            if name in filter_counts:
                filter_counts[name] += 1
    filter_usage = {k: _rate(v, total) for k, v in filter_counts.items()}

    sort_usage = dict(Counter(s.get("sort_by", "newest") for s in searches))
    zero_results = sum(1 for s in searches if s.get("total_results") == 0)

    submissions = [e for e in events if e["type"] == "inquiry"]
    rate_limited = [e for e in events if e["type"] == "rate_limited"]

    return {
        "inventory": inventory,
        "inquiries": inquiry_summary,
        "searches": {
            "total": total,
            "zero_result_rate": _rate(zero_results, total),
            "top_search_terms": top_search_terms,
            "top_categories": top_categories,
            "filter_usage": filter_usage,
            "sort_usage": sort_usage,
        },
        "inquiry_submissions": len(submissions),
        "rate_limited_requests": len(rate_limited),
    }
