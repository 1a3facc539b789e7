"""Configuration models for termtrack.

TermTrackConfig holds per-service settings.
MailConfig controls outbound commit-notification e-mail.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Optional

from pydantic import BaseModel


def _env_flag(value: str | None) -> bool:
    return (value or "").strip().lower() == "true"


class MailConfig(BaseModel):
    """SMTP settings. Mail is a no-op unless ``enabled`` and fully configured."""

    enabled: bool = False
    host: Optional[str] = None
    port: int = 587
    secure: bool = False  # implicit TLS (port 465) instead of STARTTLS
    user: Optional[str] = None
    password: Optional[str] = None
    sender: Optional[str] = None
    timeout: float = 10.0
    max_attempts: int = 3

    @property
    def is_configured(self) -> bool:
        return bool(self.enabled and self.host and self.user and self.password)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> MailConfig:
        """Build from ``EMAIL_*`` environment variables."""
        env = os.environ if environ is None else environ
        return cls(
            enabled=_env_flag(env.get("EMAIL_ENABLED")),
            host=env.get("EMAIL_HOST") or None,
            port=int(env.get("EMAIL_PORT") or 587),
            secure=_env_flag(env.get("EMAIL_SECURE")),
            user=env.get("EMAIL_USER") or None,
            password=env.get("EMAIL_PASS") or None,
            sender=env.get("EMAIL_FROM") or None,
        )


class TermTrackConfig(BaseModel):
    """Per-service configuration."""

    db_path: str = ":memory:"
    db_url: Optional[str] = None
    busy_timeout_ms: int = 5000
    commit_notifications: bool = True
    mail: MailConfig = MailConfig()
