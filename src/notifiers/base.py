"""
Base notifier interface.
Every delivery channel (email gateway, Twilio, HTTP SMS gateway) implements it.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional

from utils.logger import get_logger

logger = get_logger("notifier")


class TransportUnavailable(Exception):
    """
    The notification backend itself cannot be reached (client could not be
    built, connection refused, authentication to the relay failed).

    Raised before any per-recipient result exists; the dispatcher reports
    the whole dispatch as a single fatal error.
    """


@dataclass(frozen=True)
class DeliveryResult:
    recipient: str
    success: bool
    tracking_token: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, recipient: str, tracking_token: Optional[str] = None) -> "DeliveryResult":
        return cls(recipient=recipient, success=True, tracking_token=tracking_token)

    @classmethod
    def failed(cls, recipient: str, error: str) -> "DeliveryResult":
        return cls(recipient=recipient, success=False, error=error)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"recipient": self.recipient, "success": self.success}
        if self.tracking_token:
            data["trackingToken"] = self.tracking_token
        if self.error:
            data["error"] = self.error
        return data


class BaseNotifier(ABC):
    """
    Abstract base class for notification channels.

    ``send`` delivers one message to one recipient and reports the outcome
    as a DeliveryResult. Individual failures are returned, not raised; only
    TransportUnavailable may escape.
    """

    @abstractmethod
    def send(self, recipient: str, message: str) -> DeliveryResult:
        """
        Send ``message`` to ``recipient``.

        Returns:
            DeliveryResult with success flag, optional tracking token and
            error text on failure.

        Raises:
            TransportUnavailable: the backend cannot be reached at all.
        """

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """True if all required credentials are present."""

    @property
    @abstractmethod
    def channel_name(self) -> str:
        """Channel key used in logs and status-check messages (e.g. "twilio")."""

    @contextmanager
    def session(self) -> Iterator["BaseNotifier"]:
        """
        Scope that wraps all sends of one dispatch.

        The default holds no resources. Channels that keep a connection open
        across recipients override it and raise TransportUnavailable when the
        connection cannot be established.
        """
        yield self

    @property
    def supports_status_check(self) -> bool:
        return False

    def check_delivery_status(self, tracking_token: str) -> Optional[str]:
        """
        Best-effort delivery status lookup for a previously sent message.
        Returns the backend's status string, or None if unknown.
        """
        return None

    def not_configured(self, recipient: str) -> DeliveryResult:
        logger.warning(
            "notifier.not_configured",
            extra={"channel": self.channel_name, "recipient": recipient},
        )
        return DeliveryResult.failed(recipient, f"{self.channel_name} not configured")
