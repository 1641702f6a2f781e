from __future__ import annotations

import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import make_msgid
from typing import Protocol

from slotbot.domain import DeliveryError, EmailMessage


class EmailSender(Protocol):
    def send(self, message: EmailMessage) -> str:
        """Deliver the message and return its message id, or raise DeliveryError."""
        ...


class SmtpEmailSender:
    def __init__(self, *, host: str, port: int, username: str, password: str, timeout_seconds: float = 30.0):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.timeout_seconds = timeout_seconds

    def _build_mime(self, message: EmailMessage, message_id: str) -> MIMEMultipart:
        msg = MIMEMultipart()
        msg["From"] = message.sender
        msg["To"] = message.recipient
        msg["Subject"] = message.subject
        msg["Message-ID"] = message_id
        msg.attach(MIMEText(message.html_body, "html", "utf-8"))
        return msg

    def send(self, message: EmailMessage) -> str:
        if not self.username or not self.password:
            raise DeliveryError("Email credentials are not configured")

        message_id = make_msgid(domain=message.sender.rpartition("@")[2] or None)
        msg = self._build_mime(message, message_id)

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout_seconds) as server:
                server.starttls()
                server.login(self.username, self.password)
                refused = server.sendmail(message.sender, [message.recipient], msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            raise DeliveryError(f"SMTP delivery failed: {type(e).__name__}: {e}") from e

        if refused:
            raise DeliveryError(f"Recipients refused: {', '.join(refused)}")
        return message_id
