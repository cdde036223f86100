"""
HTTP SMS gateway notifier.
Posts form-encoded messages to a simple SMS gateway (Textbelt-style API):

    POST {SMS_GATEWAY_URL}   phone=...&message=...&key=...
    -> {"success": true, "textId": "12345"}
    -> {"success": false, "error": "Out of quota"}

    GET {SMS_GATEWAY_STATUS_URL}/{textId}
    -> {"status": "DELIVERED"}
"""

from typing import Optional

import requests

from notifiers.base import BaseNotifier, DeliveryResult, TransportUnavailable
from utils.config import GatewaySettings
from utils.logger import get_logger

logger = get_logger("notifier.http")


class HttpGatewayNotifier(BaseNotifier):
    """Send alerts through a form-POST SMS gateway."""

    def __init__(self, conf: GatewaySettings, session: Optional[requests.Session] = None):
        self.conf = conf
        self.http = session or requests.Session()

        if not self.is_configured:
            logger.warning("notifier.http_unconfigured: SMS_GATEWAY_URL/SMS_GATEWAY_KEY missing")

    @property
    def is_configured(self) -> bool:
        return bool(self.conf.url and self.conf.key)

    @property
    def channel_name(self) -> str:
        return "http"

    def send(self, recipient: str, message: str) -> DeliveryResult:
        if not self.is_configured:
            return self.not_configured(recipient)

        payload = {"phone": recipient, "message": message, "key": self.conf.key}

        try:
            response = self.http.post(self.conf.url, data=payload, timeout=self.conf.timeout)
            response.raise_for_status()
            body = response.json()
        except requests.exceptions.Timeout as e:
            logger.error("notifier.http_timeout", extra={"to": recipient, "error": str(e)})
            return DeliveryResult.failed(recipient, f"timeout: {e}")
        except requests.exceptions.ConnectionError as e:
            raise TransportUnavailable(f"SMS gateway unreachable: {e}") from e
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            logger.error("notifier.http_error", extra={"to": recipient, "status": status})
            return DeliveryResult.failed(recipient, f"gateway returned HTTP {status}")
        except ValueError as e:
            logger.error("notifier.http_invalid_response", extra={"to": recipient, "error": str(e)})
            return DeliveryResult.failed(recipient, "gateway returned invalid JSON")
        except requests.exceptions.RequestException as e:
            logger.error("notifier.http_error", extra={"to": recipient, "error": str(e)})
            return DeliveryResult.failed(recipient, str(e))

        if not isinstance(body, dict) or not body.get("success"):
            error = body.get("error") if isinstance(body, dict) else None
            logger.error("notifier.http_rejected", extra={"to": recipient, "error": error})
            return DeliveryResult.failed(recipient, error or "gateway rejected message")

        text_id = body.get("textId")
        logger.info("notifier.http_sent", extra={"to": recipient, "text_id": text_id})
        return DeliveryResult.ok(recipient, tracking_token=str(text_id) if text_id is not None else None)

    @property
    def supports_status_check(self) -> bool:
        return bool(self.conf.status_url)

    def check_delivery_status(self, tracking_token: str) -> Optional[str]:
        if not self.conf.status_url:
            return None

        url = f"{self.conf.status_url.rstrip('/')}/{tracking_token}"
        response = self.http.get(url, timeout=self.conf.timeout)
        response.raise_for_status()
        body = response.json()
        if not isinstance(body, dict):
            return None
        return body.get("status")
