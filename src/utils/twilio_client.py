# utils/twilio_client.py

from twilio.http.http_client import TwilioHttpClient
from twilio.rest import Client as TwilioClient

from utils.config import TwilioSettings
from utils.logger import get_logger

logger = get_logger("twilio_client")


def missing_twilio_settings(conf: TwilioSettings) -> list:
    """Names of the Twilio settings that are required but not set."""
    missing = [
        name
        for name, value in [
            ("account_sid", conf.account_sid),
            ("auth_token", conf.auth_token),
        ]
        if not value
    ]
    # Either a messaging service or a sender number is enough
    if not (conf.messaging_service_sid or conf.from_number):
        missing.append("messaging_service_sid")
    return missing


def build_client(conf: TwilioSettings) -> TwilioClient:
    """
    Build an authenticated Twilio client.

    The underlying HTTP client carries the configured timeout so a slow
    Twilio API surfaces as a failed send instead of hanging the webhook.

    Raises RuntimeError if credentials are missing.
    """
    missing = missing_twilio_settings(conf)
    if missing:
        logger.error("Missing Twilio settings", extra={"missing": missing})
        raise RuntimeError(f"Missing Twilio settings: {', '.join(missing)}")

    client = TwilioClient(
        conf.account_sid,
        conf.auth_token,
        http_client=TwilioHttpClient(timeout=conf.timeout),
    )
    logger.info("Twilio client initialized successfully")

    return client
