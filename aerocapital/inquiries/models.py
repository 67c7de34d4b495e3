from __future__ import annotations

import re
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class InquiryType(str, Enum):
    aircraft = "aircraft"
    financing = "financing"
    general = "general"
    partnership = "partnership"

    @property
    def label(self) -> str:
        return f"{self.value.capitalize()} Inquiry"


class InquiryStatus(str, Enum):
    new = "new"
    in_progress = "in_progress"
    responded = "responded"
    closed = "closed"
    spam = "spam"


class InquiryPriority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    urgent = "urgent"


class ContactMethod(str, Enum):
    email = "email"
    phone = "phone"
    either = "either"


class InquiryRequest(BaseModel):
    full_name: str = Field(..., min_length=2, max_length=100)
    email: str = Field(..., max_length=254)
    phone: str | None = None
    company_name: str | None = Field(default=None, max_length=100)
    subject: str = Field(..., min_length=5, max_length=200)
    message: str = Field(..., min_length=10, max_length=2000)
    preferred_contact_method: ContactMethod | None = None
    inquiry_type: InquiryType | None = None
    aircraft_id: str | None = None

    @field_validator("email")
    @classmethod
    def email_is_valid(cls, v: str) -> str:
        v = v.strip()
        if not _EMAIL_RE.match(v):
            raise ValueError("Invalid email address")
        return v.lower()

    @field_validator("phone")
    @classmethod
    def phone_has_enough_digits(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        if len(re.sub(r"\D", "", v)) < 10:
            raise ValueError("Phone number must be at least 10 digits")
        return v.strip()

    def resolved_type(self) -> InquiryType:
        if self.inquiry_type is not None:
            return self.inquiry_type
        return InquiryType.aircraft if self.aircraft_id else InquiryType.general


class Inquiry(BaseModel):
    id: str
    full_name: str
    email: str
    phone: str | None = None
    company_name: str | None = None
    subject: str
    message: str
    preferred_contact_method: ContactMethod | None = None
    inquiry_type: InquiryType = InquiryType.general
    aircraft_id: str | None = None
    user: str | None = None
    status: InquiryStatus = InquiryStatus.new
    priority: InquiryPriority = InquiryPriority.medium
    source: str = "website"
    ip_address: str | None = None
    user_agent: str | None = None
    admin_notes: str | None = None
    created_at: datetime
    updated_at: datetime
    responded_at: datetime | None = None


class InquiryUpdate(BaseModel):
    status: InquiryStatus | None = None
    priority: InquiryPriority | None = None
    admin_notes: str | None = Field(default=None, max_length=5000)


class InquiryReceipt(BaseModel):
    id: str
    created_at: datetime


class InquiryCreatedResponse(BaseModel):
    success: bool = True
    message: str = "Inquiry submitted successfully"
    inquiry: InquiryReceipt
