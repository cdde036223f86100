import json
from pathlib import Path

import pytest

EVENTS_DIR = Path(__file__).parent / "events"

# Every variable utils.config reads; cleared so the host environment never leaks in
CONFIG_VARS = [
    "NOTIFIER_CHANNEL",
    "ALERT_RECIPIENTS",
    "SMS_RECIPIENTS",
    "WEBHOOK_LOG_PATH",
    "ALERT_SENDER_NAME",
    "SMTP_HOST",
    "SMTP_PORT",
    "SMTP_USER",
    "SMTP_PASS",
    "SMTP_TIMEOUT",
    "SMTP_SECRET_NAME",
    "TWILIO_ACCOUNT_SID",
    "TWILIO_AUTH_TOKEN",
    "TWILIO_MESSAGING_SERVICE_SID",
    "TWILIO_FROM_NUMBER",
    "TWILIO_STATUS_CALLBACK_URL",
    "TWILIO_TIMEOUT",
    "TWILIO_SECRET_NAME",
    "SMS_GATEWAY_URL",
    "SMS_GATEWAY_KEY",
    "SMS_GATEWAY_STATUS_URL",
    "SMS_GATEWAY_TIMEOUT",
    "STATUS_QUEUE_URL",
    "STATUS_CHECK_DELAY_SECONDS",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in CONFIG_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("AWS_REGION", "us-east-1")
    monkeypatch.setenv("WEBHOOK_LOG_PATH", str(tmp_path / "square_webhook_log.txt"))


@pytest.fixture
def load_event():
    def _load(name):
        with open(EVENTS_DIR / name, "r", encoding="utf-8") as f:
            return json.load(f)
    return _load
