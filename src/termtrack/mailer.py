"""Outbound e-mail for commit notifications.

SmtpMailer is the default Mailer. When mail is disabled or the SMTP settings
are incomplete it logs and returns. Dropped connections and timeouts are
retried with tenacity; delivery errors are logged, never raised.
"""

from __future__ import annotations

import html
import logging
import smtplib
from email.message import EmailMessage

import tenacity

from termtrack.models.config import MailConfig

logger = logging.getLogger(__name__)


def _is_retryable(exc: BaseException) -> bool:
    """Check if a delivery error is worth another attempt.

    Retryable: dropped or refused connections, timeouts.
    Not retryable: authentication failures, rejected recipients or data.
    """
    if isinstance(exc, smtplib.SMTPAuthenticationError):
        return False
    return isinstance(
        exc,
        (
            smtplib.SMTPServerDisconnected,
            smtplib.SMTPConnectError,
            ConnectionError,
            TimeoutError,
        ),
    )


def render_commit_email(
    project_name: str,
    branch_name: str,
    author_name: str,
    message: str,
) -> tuple[str, str]:
    """Build the (subject, html body) of a new-commit notification."""
    subject = f"[{project_name}] New commit on {branch_name}"
    body = (
        "<p><strong>{author}</strong> committed to "
        "<strong>{branch}</strong> in <strong>{project}</strong>:</p>"
        "<blockquote>{message}</blockquote>"
    ).format(
        author=html.escape(author_name),
        branch=html.escape(branch_name),
        project=html.escape(project_name),
        message=html.escape(message),
    )
    return subject, body


class SmtpMailer:
    """Sends mail over SMTP (STARTTLS, or implicit TLS when ``secure``)."""

    def __init__(self, config: MailConfig | None = None) -> None:
        self._config = config or MailConfig()
        if self._config.enabled and not self._config.is_configured:
            logger.warning(
                "Email is enabled, but SMTP configuration is incomplete. "
                "Emails will not be sent."
            )
        elif not self._config.enabled:
            logger.info("Email sending is disabled.")

    @property
    def config(self) -> MailConfig:
        return self._config

    def _build_message(self, to: str, subject: str, html_body: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self._config.sender or self._config.user or ""
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(html_body, subtype="html")
        return msg

    def _deliver(self, msg: EmailMessage) -> None:
        cfg = self._config
        if cfg.secure:
            client: smtplib.SMTP = smtplib.SMTP_SSL(cfg.host, cfg.port, timeout=cfg.timeout)
        else:
            client = smtplib.SMTP(cfg.host, cfg.port, timeout=cfg.timeout)
        with client:
            if not cfg.secure:
                client.starttls()
            client.login(cfg.user, cfg.password)
            client.send_message(msg)

    def send_email(self, to: str, subject: str, html: str) -> None:
        """Deliver one message, retrying transient connection failures.

        Never raises: a message that cannot be delivered is logged and dropped.
        """
        if not self._config.is_configured:
            logger.info(
                "Email not sent to %s (subject: %s): sending is disabled or not configured.",
                to,
                subject,
            )
            return

        msg = self._build_message(to, subject, html)
        retryer = tenacity.Retrying(
            retry=tenacity.retry_if_exception(_is_retryable),
            wait=tenacity.wait_exponential(multiplier=1, min=1, max=10),
            stop=tenacity.stop_after_attempt(self._config.max_attempts),
            before_sleep=tenacity.before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        try:
            retryer(self._deliver, msg)
        except (smtplib.SMTPException, OSError):
            logger.error("Failed to send email to %s", to, exc_info=True)
            return
        logger.info("Email sent to %s (subject: %s)", to, subject)
