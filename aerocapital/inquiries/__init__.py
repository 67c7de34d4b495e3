"""
Customer inquiries.

Responsibilities:
- Validate contact and aircraft inquiry submissions.
- Store inquiries and support the admin triage workflow.
- Notify the brokerage and confirm receipt to the customer by email.
"""
