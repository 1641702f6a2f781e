from __future__ import annotations

import logging
from pathlib import Path

from slotbot.domain import EmailMessage
from slotbot.email_sender import EmailSender

logger = logging.getLogger(__name__)

PREVIEW_CHARS = 500


def _write_preview(message: EmailMessage, preview_path: str) -> None:
    logger.info("DRY RUN: email would be sent")
    logger.info("From: %s", message.sender)
    logger.info("To: %s", message.recipient)
    logger.info("Subject: %s", message.subject)
    logger.info("Email body preview:\n%s...", message.html_body[:PREVIEW_CHARS])

    try:
        Path(preview_path).write_text(message.html_body, encoding="utf-8")
    except OSError as e:
        logger.error("Error saving preview to %s (%s: %s)", preview_path, type(e).__name__, e)
        return
    logger.info("Output saved to %s", preview_path)


def dispatch(message: EmailMessage, *, sender: EmailSender, preview: bool, preview_path: str) -> str | None:
    """Send the message, or in preview mode write it to ``preview_path`` instead.

    Never raises: a delivery failure is logged and None is returned.
    """
    if preview:
        _write_preview(message, preview_path)
        return None

    try:
        message_id = sender.send(message)
    except Exception as e:
        logger.error("Error sending email (%s: %s)", type(e).__name__, e)
        return None

    logger.info("Email sent: %s", message_id)
    return message_id
