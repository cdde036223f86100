import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from utils.logger import get_logger
from utils.secrets import load_optional_secret

logger = get_logger("config")

CHANNELS = ("email", "twilio", "http")
DEFAULT_CHANNEL = "email"
DEFAULT_LOG_PATH = "/tmp/square_webhook_log.txt"

# SQS accepts DelaySeconds in [0, 900]
MAX_STATUS_DELAY_SECONDS = 900


@dataclass(frozen=True)
class SmtpSettings:
    host: str = "smtp.gmail.com"
    port: int = 587
    user: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)
    sender_name: str = "Payment Alert"
    timeout: int = 10


@dataclass(frozen=True)
class TwilioSettings:
    account_sid: Optional[str] = None
    auth_token: Optional[str] = field(default=None, repr=False)
    messaging_service_sid: Optional[str] = None
    from_number: Optional[str] = None
    status_callback_url: Optional[str] = None
    timeout: int = 10


@dataclass(frozen=True)
class GatewaySettings:
    url: Optional[str] = None
    key: Optional[str] = field(default=None, repr=False)
    status_url: Optional[str] = None
    timeout: int = 10


@dataclass(frozen=True)
class Settings:
    """Immutable configuration, loaded once per container."""

    channel: str = DEFAULT_CHANNEL
    recipients: Tuple[str, ...] = ()
    log_path: str = DEFAULT_LOG_PATH
    region: str = "us-east-1"
    status_queue_url: Optional[str] = None
    status_check_delay_seconds: int = 60
    smtp: SmtpSettings = field(default_factory=SmtpSettings)
    twilio: TwilioSettings = field(default_factory=TwilioSettings)
    gateway: GatewaySettings = field(default_factory=GatewaySettings)


def parse_recipients(raw: Optional[str]) -> Tuple[str, ...]:
    """
    Split a comma-separated recipient list.

    Entries are trimmed and empty entries dropped, so "a@x.com, ,b@x.com,"
    yields ("a@x.com", "b@x.com").
    """
    if not raw:
        return ()
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def _int_env(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(
            "config.invalid_int",
            extra={"variable": name, "value": raw, "default": default},
        )
        return default


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from environment variables (and Secrets Manager, when a
    *_SECRET_NAME variable is set).

    Never raises for missing values: absent recipients or credentials are
    logged as warnings and surface later as "no alert triggered" or as
    per-recipient send failures.
    """
    if env is None:
        env = os.environ

    region = env.get("AWS_REGION") or "us-east-1"

    channel = (env.get("NOTIFIER_CHANNEL") or DEFAULT_CHANNEL).strip().lower()
    if channel not in CHANNELS:
        logger.warning(
            "config.unknown_channel",
            extra={"channel": channel, "fallback": DEFAULT_CHANNEL},
        )
        channel = DEFAULT_CHANNEL

    recipients = parse_recipients(env.get("ALERT_RECIPIENTS") or env.get("SMS_RECIPIENTS"))
    if not recipients:
        logger.warning("config.no_recipients: alerts will not be dispatched")

    smtp_secret = load_optional_secret(env.get("SMTP_SECRET_NAME"), region)
    smtp = SmtpSettings(
        host=env.get("SMTP_HOST") or "smtp.gmail.com",
        port=_int_env(env, "SMTP_PORT", 587),
        user=smtp_secret.get("user") or env.get("SMTP_USER"),
        password=smtp_secret.get("password") or env.get("SMTP_PASS"),
        sender_name=env.get("ALERT_SENDER_NAME") or "Payment Alert",
        timeout=_int_env(env, "SMTP_TIMEOUT", 10),
    )

    # Support both "messaging_service_sid" and legacy "msid" in the secret
    twilio_secret = load_optional_secret(env.get("TWILIO_SECRET_NAME"), region)
    twilio = TwilioSettings(
        account_sid=twilio_secret.get("account_sid") or env.get("TWILIO_ACCOUNT_SID"),
        auth_token=twilio_secret.get("auth_token") or env.get("TWILIO_AUTH_TOKEN"),
        messaging_service_sid=(
            twilio_secret.get("messaging_service_sid")
            or twilio_secret.get("msid")
            or env.get("TWILIO_MESSAGING_SERVICE_SID")
        ),
        from_number=twilio_secret.get("from_number") or env.get("TWILIO_FROM_NUMBER"),
        status_callback_url=env.get("TWILIO_STATUS_CALLBACK_URL") or None,
        timeout=_int_env(env, "TWILIO_TIMEOUT", 10),
    )

    gateway = GatewaySettings(
        url=env.get("SMS_GATEWAY_URL"),
        key=env.get("SMS_GATEWAY_KEY"),
        status_url=env.get("SMS_GATEWAY_STATUS_URL"),
        timeout=_int_env(env, "SMS_GATEWAY_TIMEOUT", 10),
    )

    delay = _int_env(env, "STATUS_CHECK_DELAY_SECONDS", 60)
    delay = max(0, min(delay, MAX_STATUS_DELAY_SECONDS))

    settings = Settings(
        channel=channel,
        recipients=recipients,
        log_path=env.get("WEBHOOK_LOG_PATH") or DEFAULT_LOG_PATH,
        region=region,
        status_queue_url=env.get("STATUS_QUEUE_URL") or None,
        status_check_delay_seconds=delay,
        smtp=smtp,
        twilio=twilio,
        gateway=gateway,
    )

    logger.info(
        "config.loaded",
        extra={
            "channel": settings.channel,
            "recipient_count": len(settings.recipients),
            "status_queue": bool(settings.status_queue_url),
        },
    )
    return settings
