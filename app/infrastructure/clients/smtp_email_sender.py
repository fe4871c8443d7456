from __future__ import annotations

import logging
import smtplib
import ssl
from concurrent.futures import Executor
from email.mime.text import MIMEText

from app.application.ports.email_sender_port import EmailSenderPort
from app.application.use_cases.auth_common import redact_email
from app.domain.exceptions import EmailDeliveryError


logger = logging.getLogger(__name__)


class SmtpEmailSender(EmailSenderPort):
    def __init__(
        self,
        *,
        host: str | None,
        port: int = 587,
        use_ssl: bool = False,
        username: str | None = None,
        password: str | None = None,
        sender: str | None = None,
        timeout_seconds: float = 15,
    ):
        self._host = host
        self._port = port
        self._use_ssl = use_ssl
        self._username = username
        self._password = password
        self._sender = sender or username
        self._timeout_seconds = timeout_seconds

    @property
    def is_configured(self) -> bool:
        return bool(self._host and self._sender)

    def send(self, *, to: str, subject: str, body: str) -> None:
        if not self.is_configured:
            logger.info("SMTP not configured; email '%s' to %s logged only:\n%s", subject, redact_email(to), body)
            return

        msg = MIMEText(body, "plain", "utf-8")
        msg["Subject"] = subject
        msg["From"] = self._sender
        msg["To"] = to

        context = ssl.create_default_context()
        try:
            if self._use_ssl:
                with smtplib.SMTP_SSL(self._host, self._port, context=context, timeout=self._timeout_seconds) as server:
                    self._login(server)
                    server.sendmail(self._sender, [to], msg.as_string())
            else:
                with smtplib.SMTP(self._host, self._port, timeout=self._timeout_seconds) as server:
                    server.starttls(context=context)
                    self._login(server)
                    server.sendmail(self._sender, [to], msg.as_string())
        except (smtplib.SMTPException, OSError) as exc:
            raise EmailDeliveryError(f"SMTP delivery failed: {type(exc).__name__}") from exc

        logger.info("Email '%s' sent to %s.", subject, redact_email(to))

    def _login(self, server: smtplib.SMTP) -> None:
        if self._username and self._password:
            server.login(self._username, self._password)


class BackgroundEmailSender(EmailSenderPort):
    """Hands messages to an executor so callers never wait on SMTP."""

    def __init__(self, *, inner: EmailSenderPort, executor: Executor):
        self._inner = inner
        self._executor = executor

    def send(self, *, to: str, subject: str, body: str) -> None:
        future = self._executor.submit(self._inner.send, to=to, subject=subject, body=body)
        future.add_done_callback(lambda f: self._log_failure(f, to=to, subject=subject))

    @staticmethod
    def _log_failure(future, *, to: str, subject: str) -> None:
        exc = future.exception()
        if exc is not None:
            logger.warning("Email '%s' to %s was not delivered: %s", subject, redact_email(to), exc)
