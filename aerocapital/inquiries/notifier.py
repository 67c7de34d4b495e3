from __future__ import annotations

import html
import logging
import smtplib
from email.message import EmailMessage

from ..listings.models import AircraftRecord
from .config import DEFAULT_NOTIFIER_CONFIG, NotifierConfig
from .models import Inquiry

logger = logging.getLogger(__name__)


def _admin_lines(inquiry: Inquiry, aircraft: AircraftRecord | None) -> list[tuple[str, str]]:
    rows = [
        ("Name", inquiry.full_name),
        ("Email", inquiry.email),
        ("Phone", inquiry.phone or "Not provided"),
        ("Company", inquiry.company_name or "Not provided"),
        ("Type", inquiry.inquiry_type.label),
        ("Subject", inquiry.subject),
    ]
    if inquiry.preferred_contact_method:
        rows.append(("Preferred contact", inquiry.preferred_contact_method.value))
    if aircraft is not None:
        rows.append(("Aircraft", f"{aircraft.title} ({aircraft.slug})"))
    rows.append(("Received", inquiry.created_at.isoformat()))
    return rows


def _render(heading: str, rows: list[tuple[str, str]], body: str) -> tuple[str, str]:
    text = "\n".join(f"{label}: {value}" for label, value in rows)
    text = f"{heading}\n\n{text}\n\n{body}\n"

    html_rows = "".join(
        f"<tr><th align='left'>{html.escape(label)}</th><td>{html.escape(value)}</td></tr>"
        for label, value in rows
    )
    html_body = (
        f"<html><body><h2>{html.escape(heading)}</h2>"
        f"<table>{html_rows}</table>"
        f"<p>{html.escape(body).replace(chr(10), '<br>')}</p></body></html>"
    )
    return text, html_body


def build_admin_notification(
    inquiry: Inquiry,
    aircraft: AircraftRecord | None = None,
    config: NotifierConfig = DEFAULT_NOTIFIER_CONFIG,
) -> EmailMessage:
    text, html_body = _render(
        "New inquiry received", _admin_lines(inquiry, aircraft), inquiry.message,
    )
    msg = EmailMessage()
    msg["Subject"] = f"New {inquiry.inquiry_type.label}: {inquiry.subject}"
    msg["From"] = config.from_email
    msg["To"] = config.admin_email
    msg["Reply-To"] = inquiry.email
    msg.set_content(text)
    msg.add_alternative(html_body, subtype="html")
    return msg


def build_customer_confirmation(
    inquiry: Inquiry,
    aircraft: AircraftRecord | None = None,
    config: NotifierConfig = DEFAULT_NOTIFIER_CONFIG,
) -> EmailMessage:
    rows = [("Subject", inquiry.subject), ("Reference", inquiry.id)]
    if aircraft is not None:
        rows.append(("Aircraft", aircraft.title))
    text, html_body = _render(
        f"Thank you, {inquiry.full_name}",
        rows,
        "We have received your inquiry and a member of our team will be in "
        "touch within one business day.",
    )
    msg = EmailMessage()
    msg["Subject"] = f"We received your inquiry: {inquiry.subject}"
    msg["From"] = config.from_email
    msg["To"] = inquiry.email
    msg["Reply-To"] = config.admin_email
    msg.set_content(text)
    msg.add_alternative(html_body, subtype="html")
    return msg


class EmailNotifier:
    """Deliver inquiry emails over SMTP, or log them when no host is set."""

    def __init__(self, config: NotifierConfig = DEFAULT_NOTIFIER_CONFIG) -> None:
        self.config = config

    def send(self, msg: EmailMessage) -> None:
        cfg = self.config
        if not cfg.smtp_host:
            logger.info(
                "SMTP not configured, email to %s not sent: %s",
                msg["To"], msg["Subject"],
            )
            return

        if cfg.use_tls:
            with smtplib.SMTP(cfg.smtp_host, cfg.smtp_port, timeout=cfg.timeout) as smtp:
                smtp.starttls()
                if cfg.smtp_user:
                    smtp.login(cfg.smtp_user, cfg.smtp_password)
                smtp.send_message(msg)
        else:
            with smtplib.SMTP_SSL(cfg.smtp_host, cfg.smtp_port, timeout=cfg.timeout) as smtp:
                if cfg.smtp_user:
                    smtp.login(cfg.smtp_user, cfg.smtp_password)
                smtp.send_message(msg)

    def notify_inquiry(
        self, inquiry: Inquiry, aircraft: AircraftRecord | None = None,
    ) -> None:
        """Send the admin notification and the customer confirmation.

        Delivery problems are logged; the inquiry is already stored and the
        customer's submission must not fail because of email.
        """
        messages = (
            ("admin notification", build_admin_notification(inquiry, aircraft, self.config)),
            ("customer confirmation", build_customer_confirmation(inquiry, aircraft, self.config)),
        )
        for kind, msg in messages:
            try:
                self.send(msg)
            except (smtplib.SMTPException, OSError):
                logger.warning(
                    "Failed to send %s for inquiry %s", kind, inquiry.id, exc_info=True,
                )


_notifier = EmailNotifier()


def get_notifier() -> EmailNotifier:
    return _notifier
