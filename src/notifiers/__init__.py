"""
Notification channels for payment alerts.

- email   → SMTP relay to carrier email-to-SMS gateways
- twilio  → Twilio Messages API
- http    → form-POST SMS gateway

Usage:
    from notifiers import build_notifier

    notifier = build_notifier(settings)
    result = notifier.send("+15555550123", "Refund R1 created for $5.00.")
"""

from typing import Callable, Dict

from notifiers.base import BaseNotifier, DeliveryResult, TransportUnavailable
from utils.config import Settings
from utils.logger import get_logger

logger = get_logger("notifiers")


def _email(settings: Settings) -> BaseNotifier:
    from notifiers.email_gateway import EmailGatewayNotifier
    return EmailGatewayNotifier(settings.smtp)


def _twilio(settings: Settings) -> BaseNotifier:
    from notifiers.twilio_sms import TwilioNotifier
    return TwilioNotifier(settings.twilio)


def _http(settings: Settings) -> BaseNotifier:
    from notifiers.http_gateway import HttpGatewayNotifier
    return HttpGatewayNotifier(settings.gateway)


CHANNEL_BUILDERS: Dict[str, Callable[[Settings], BaseNotifier]] = {
    "email": _email,
    "twilio": _twilio,
    "http": _http,
}


def build_notifier(settings: Settings) -> BaseNotifier:
    """Instantiate the notifier selected by ``settings.channel``."""
    builder = CHANNEL_BUILDERS.get(settings.channel)
    if builder is None:
        raise ValueError(f"Unknown notification channel: {settings.channel}")

    notifier = builder(settings)
    logger.info(
        "notifiers.selected",
        extra={"channel": notifier.channel_name, "configured": notifier.is_configured},
    )
    return notifier


__all__ = [
    "BaseNotifier",
    "DeliveryResult",
    "TransportUnavailable",
    "build_notifier",
]
