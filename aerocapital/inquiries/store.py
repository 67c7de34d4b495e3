from __future__ import annotations

import uuid
from collections import Counter
from datetime import datetime, timezone

from .models import (
    Inquiry,
    InquiryPriority,
    InquiryRequest,
    InquiryStatus,
)


class InquiryNotFoundError(LookupError):
    pass


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InquiryStore:
    """In-process stand-in for the hosted inquiries table."""

    def __init__(self) -> None:
        self._inquiries: dict[str, Inquiry] = {}

    def create(
        self,
        request: InquiryRequest,
        *,
        user: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
        source: str = "website",
    ) -> Inquiry:
        now = _now()
        inquiry = Inquiry(
            id=str(uuid.uuid4()),
            full_name=request.full_name,
            email=request.email,
            phone=request.phone,
            company_name=request.company_name or None,
            subject=request.subject,
            message=request.message,
            preferred_contact_method=request.preferred_contact_method,
            inquiry_type=request.resolved_type(),
            aircraft_id=request.aircraft_id,
            user=user,
            source=source,
            ip_address=ip_address,
            user_agent=user_agent,
            created_at=now,
            updated_at=now,
        )
        self._inquiries[inquiry.id] = inquiry
        return inquiry

    def get(self, inquiry_id: str) -> Inquiry:
        inquiry = self._inquiries.get(inquiry_id)
        if inquiry is None:
            raise InquiryNotFoundError(inquiry_id)
        return inquiry

    def list_all(
        self,
        status: InquiryStatus | None = None,
        user: str | None = None,
    ) -> list[Inquiry]:
        """Inquiries newest first, optionally narrowed by status or owner."""
        rows = [
            i for i in reversed(self._inquiries.values())
            if (status is None or i.status == status)
            and (user is None or i.user == user)
        ]
        # Stable sort: same-timestamp inquiries stay latest-inserted first.
        rows.sort(key=lambda i: i.created_at, reverse=True)
        return rows

    def _replace(self, inquiry_id: str, **changes) -> Inquiry:
        current = self.get(inquiry_id)
        updated = current.model_copy(update={**changes, "updated_at": _now()})
        self._inquiries[inquiry_id] = updated
        return updated

    def update_status(self, inquiry_id: str, status: InquiryStatus) -> Inquiry:
        changes: dict = {"status": status}
        if status == InquiryStatus.responded:
            changes["responded_at"] = _now()
        return self._replace(inquiry_id, **changes)

    def update_priority(self, inquiry_id: str, priority: InquiryPriority) -> Inquiry:
        return self._replace(inquiry_id, priority=priority)

    def update_notes(self, inquiry_id: str, notes: str) -> Inquiry:
        return self._replace(inquiry_id, admin_notes=notes)

    def delete(self, inquiry_id: str) -> None:
        if self._inquiries.pop(inquiry_id, None) is None:
            raise InquiryNotFoundError(inquiry_id)

    def count_by_status(self) -> dict[str, int]:
        counts = Counter(i.status.value for i in self._inquiries.values())
        return {s.value: counts.get(s.value, 0) for s in InquiryStatus}

    def clear(self) -> None:
        self._inquiries.clear()


_store = InquiryStore()


def get_inquiry_store() -> InquiryStore:
    return _store
