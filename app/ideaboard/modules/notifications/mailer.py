from __future__ import annotations

import logging
import smtplib
import threading
from dataclasses import dataclass, field
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from app.ideaboard.errors import DeliveryError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MailMessage:
    to: str
    subject: str
    body: str
    html: str | None = None


class Mailer:
    def send(self, message: MailMessage) -> None:
        raise NotImplementedError


@dataclass(frozen=True)
class SmtpMailer(Mailer):
    server: str
    port: int
    use_tls: bool
    username: str
    password: str
    sender: str

    def _build(self, message: MailMessage):
        if message.html:
            msg = MIMEMultipart("alternative")
            msg.attach(MIMEText(message.body, "plain"))
            msg.attach(MIMEText(message.html, "html"))
        else:
            msg = MIMEText(message.body, "plain")
        msg["Subject"] = message.subject
        msg["From"] = self.sender
        msg["To"] = message.to
        return msg

    def send(self, message: MailMessage) -> None:
        if not self.server:
            raise DeliveryError(message.to, "SMTP server not configured (SMTP_SERVER missing)")
        try:
            with smtplib.SMTP(self.server, self.port, timeout=30) as smtp:
                if self.use_tls:
                    smtp.starttls()
                if self.username and self.password:
                    smtp.login(self.username, self.password)
                smtp.send_message(self._build(message))
        except smtplib.SMTPAuthenticationError as e:
            raise DeliveryError(message.to, f"SMTP authentication failed: {e}") from e
        except (smtplib.SMTPException, OSError) as e:
            raise DeliveryError(message.to, f"SMTP error: {e}") from e
        logger.info("Sent email to %s with subject: %s", message.to, message.subject)


class ConsoleMailer(Mailer):
    """Local development: log the message instead of sending it."""

    def send(self, message: MailMessage) -> None:
        logger.info("Simulated email to=%s subject=%s\n%s", message.to, message.subject, message.body)


@dataclass
class MemoryMailer(Mailer):
    """Collects messages in ``outbox``; used by the test suite."""

    outbox: list[MailMessage] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def send(self, message: MailMessage) -> None:
        with self._lock:
            self.outbox.append(message)

    def sent_to(self, address: str) -> list[MailMessage]:
        with self._lock:
            return [m for m in self.outbox if m.to == address]


def mailer_from_config(config: dict) -> Mailer:
    backend = (config.get("MAIL_BACKEND") or "console").strip().lower()
    if backend == "smtp":
        return SmtpMailer(
            server=(config.get("SMTP_SERVER") or "").strip(),
            port=int(config.get("SMTP_PORT") or 587),
            use_tls=bool(config.get("SMTP_USE_TLS", True)),
            username=(config.get("SMTP_USERNAME") or "").strip(),
            password=config.get("SMTP_PASSWORD") or "",
            sender=(config.get("MAIL_FROM") or "").strip(),
        )
    if backend == "memory":
        return MemoryMailer()
    return ConsoleMailer()
