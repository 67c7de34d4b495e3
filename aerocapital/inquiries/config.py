from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class NotifierConfig:
    admin_email: str = os.getenv("ADMIN_EMAIL", "info@aerocapitalexchange.com")
    from_email: str = os.getenv("EMAIL_FROM", "noreply@aerocapitalexchange.com")
    smtp_host: str = os.getenv("SMTP_HOST", "")
    smtp_port: int = int(os.getenv("SMTP_PORT", "465"))
    smtp_user: str = os.getenv("SMTP_USER", "")
    smtp_password: str = os.getenv("SMTP_PASSWORD", "")
    use_tls: bool = os.getenv("SMTP_STARTTLS", "").lower() in ("1", "true", "yes")
    timeout: float = 10.0


DEFAULT_NOTIFIER_CONFIG = NotifierConfig()
