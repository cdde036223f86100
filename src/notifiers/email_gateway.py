"""
Email-to-SMS gateway notifier.
Relays alerts over SMTP to carrier gateway addresses (e.g. 5551234567@vtext.com).
"""

import smtplib
import ssl
from contextlib import contextmanager
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import Iterator, Optional

from notifiers.base import BaseNotifier, DeliveryResult, TransportUnavailable
from utils.config import SmtpSettings
from utils.logger import get_logger

logger = get_logger("notifier.email")


class EmailGatewayNotifier(BaseNotifier):
    """Send alerts as plain-text email through an SMTP relay."""

    def __init__(self, conf: SmtpSettings, smtp_factory=smtplib.SMTP):
        self.conf = conf
        self._smtp_factory = smtp_factory
        self._server: Optional[smtplib.SMTP] = None

        if not self.is_configured:
            logger.warning("notifier.email_unconfigured: SMTP_USER/SMTP_PASS missing")

    @property
    def is_configured(self) -> bool:
        return bool(self.conf.host and self.conf.user and self.conf.password)

    @property
    def channel_name(self) -> str:
        return "email"

    def _connect(self) -> smtplib.SMTP:
        try:
            server = self._smtp_factory(self.conf.host, self.conf.port, timeout=self.conf.timeout)
        except (OSError, smtplib.SMTPException) as e:
            raise TransportUnavailable(f"SMTP connect to {self.conf.host}:{self.conf.port} failed: {e}") from e

        try:
            server.starttls(context=ssl.create_default_context())
            server.login(self.conf.user, self.conf.password)
        except (OSError, smtplib.SMTPException) as e:
            try:
                server.close()
            except OSError:
                pass
            raise TransportUnavailable(f"SMTP login failed: {e}") from e

        return server

    @contextmanager
    def session(self) -> Iterator["EmailGatewayNotifier"]:
        if not self.is_configured or self._server is not None:
            yield self
            return

        self._server = self._connect()
        logger.debug("notifier.email_session_open", extra={"host": self.conf.host})
        try:
            yield self
        finally:
            server, self._server = self._server, None
            try:
                server.quit()
            except (OSError, smtplib.SMTPException) as e:
                logger.debug("notifier.email_quit_error", extra={"error": str(e)})

    def _build_message(self, recipient: str, message: str) -> MIMEText:
        msg = MIMEText(message, "plain", "utf-8")
        # Blank subject: gateways prepend it to the SMS text
        msg["Subject"] = ""
        msg["From"] = formataddr((self.conf.sender_name, self.conf.user))
        msg["To"] = recipient
        return msg

    def send(self, recipient: str, message: str) -> DeliveryResult:
        if not self.is_configured:
            return self.not_configured(recipient)

        if self._server is None:
            with self.session():
                return self.send(recipient, message)

        try:
            refused = self._server.sendmail(
                self.conf.user,
                [recipient],
                self._build_message(recipient, message).as_string(),
            )
        except smtplib.SMTPRecipientsRefused as e:
            logger.error("notifier.email_refused", extra={"to": recipient, "error": str(e)})
            return DeliveryResult.failed(recipient, f"recipient refused: {e.recipients.get(recipient, e)}")
        except (OSError, smtplib.SMTPException) as e:
            logger.error("notifier.email_error", extra={"to": recipient, "error": str(e)})
            return DeliveryResult.failed(recipient, str(e))

        if refused:
            logger.error("notifier.email_refused", extra={"to": recipient, "refused": str(refused)})
            return DeliveryResult.failed(recipient, f"recipient refused: {refused}")

        logger.info("notifier.email_sent", extra={"to": recipient})
        return DeliveryResult.ok(recipient)
