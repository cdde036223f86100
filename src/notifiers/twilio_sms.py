"""
Twilio SMS notifier.
Sends alerts straight to phone numbers (E.164) through the Twilio Messages API.
"""

from typing import Any, Dict, Optional

import requests
from twilio.base.exceptions import TwilioException, TwilioRestException

from notifiers.base import BaseNotifier, DeliveryResult, TransportUnavailable
from utils.config import TwilioSettings
from utils.logger import get_logger
from utils.twilio_client import build_client, missing_twilio_settings

logger = get_logger("notifier.twilio")


class TwilioNotifier(BaseNotifier):
    """Send alerts via Twilio, returning the message SID as tracking token."""

    def __init__(self, conf: TwilioSettings, client=None):
        self.conf = conf
        self._client = client
        self._client_error: Optional[str] = None

        if self._client is not None:
            return

        missing = missing_twilio_settings(conf)
        if missing:
            logger.warning("notifier.twilio_unconfigured", extra={"missing": missing})
            return

        try:
            self._client = build_client(conf)
        except Exception as e:
            # Surfaced as a fatal transport error on the first dispatch
            self._client_error = str(e)
            logger.error("notifier.twilio_client_error", extra={"error": str(e)})

    @property
    def is_configured(self) -> bool:
        return self._client is not None or self._client_error is not None

    @property
    def channel_name(self) -> str:
        return "twilio"

    @property
    def client(self):
        if self._client is None:
            raise TransportUnavailable(
                f"Twilio client unavailable: {self._client_error or 'not configured'}"
            )
        return self._client

    def _create_kwargs(self, recipient: str, message: str) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {"to": recipient, "body": message}
        if self.conf.messaging_service_sid:
            kwargs["messaging_service_sid"] = self.conf.messaging_service_sid
        else:
            kwargs["from_"] = self.conf.from_number
        if self.conf.status_callback_url:
            kwargs["status_callback"] = self.conf.status_callback_url
        return kwargs

    def send(self, recipient: str, message: str) -> DeliveryResult:
        if not self.is_configured:
            return self.not_configured(recipient)

        client = self.client

        try:
            resp = client.messages.create(**self._create_kwargs(recipient, message))
        except TwilioRestException as e:
            logger.error(
                "notifier.twilio_error",
                extra={"to": recipient, "status": e.status, "code": e.code, "error": e.msg},
            )
            return DeliveryResult.failed(recipient, f"twilio error {e.code}: {e.msg}")
        except requests.exceptions.Timeout as e:
            logger.error("notifier.twilio_timeout", extra={"to": recipient, "error": str(e)})
            return DeliveryResult.failed(recipient, f"timeout: {e}")
        except requests.exceptions.ConnectionError as e:
            raise TransportUnavailable(f"Twilio API unreachable: {e}") from e
        except TwilioException as e:
            logger.error("notifier.twilio_error", extra={"to": recipient, "error": str(e)})
            return DeliveryResult.failed(recipient, str(e))

        sid = getattr(resp, "sid", None)
        logger.info(
            "notifier.twilio_sent",
            extra={"sid": sid, "to": recipient, "status": getattr(resp, "status", None)},
        )
        return DeliveryResult.ok(recipient, tracking_token=sid)

    @property
    def supports_status_check(self) -> bool:
        return True

    def check_delivery_status(self, tracking_token: str) -> Optional[str]:
        if self._client is None:
            return None

        msg = self._client.messages(tracking_token).fetch()
        if getattr(msg, "error_code", None):
            logger.warning(
                "notifier.twilio_delivery_error",
                extra={
                    "sid": tracking_token,
                    "error_code": msg.error_code,
                    "error_message": getattr(msg, "error_message", None),
                },
            )
        return getattr(msg, "status", None)
