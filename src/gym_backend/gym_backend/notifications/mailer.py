from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

from flask_mail import Mail, Message

logger = logging.getLogger(__name__)


class MailSender(Protocol):
    def send(self, to: str, subject: str, html: str) -> Any:
        raise NotImplementedError


class FlaskMailSender(MailSender):
    """Deliver HTML mail through Flask-Mail (must run inside an app context)."""

    def __init__(self, mail: Mail, *, sender: Optional[str] = None):
        self._mail = mail
        self._sender = sender

    def send(self, to: str, subject: str, html: str) -> Any:
        msg = Message(subject=subject, recipients=[to], html=html, sender=self._sender)
        return self._mail.send(msg)


class Notifier:
    """Best-effort mail delivery.

    Failures are logged and reported as False; they never reach the caller's workflow.
    """

    def __init__(self, sender: MailSender):
        self._sender = sender

    def notify(self, to: str, subject: str, html: str) -> bool:
        try:
            self._sender.send(to, subject, html)
            return True
        except Exception:
            logger.exception("Sending mail %r to %s failed", subject, to)
            return False
