import importlib
import json

from notifiers.base import BaseNotifier, DeliveryResult
from utils.status_queue import StatusCheckScheduler

# Target under test: src/status_worker.lambda_handler
# The configured notifier is replaced with a stub that records status lookups.


class StubStatusNotifier(BaseNotifier):
    def __init__(self, status="delivered", error=None):
        self.status = status
        self.error = error
        self.checked = []

    @property
    def is_configured(self):
        return True

    @property
    def channel_name(self):
        return "twilio"

    @property
    def supports_status_check(self):
        return True

    def send(self, recipient, message):
        return DeliveryResult.ok(recipient)

    def check_delivery_status(self, tracking_token):
        self.checked.append(tracking_token)
        if self.error:
            raise self.error
        return self.status


def _reload_worker(monkeypatch, notifier):
    monkeypatch.setenv("NOTIFIER_CHANNEL", "twilio")
    worker = importlib.reload(importlib.import_module("status_worker"))
    worker.notifier = notifier
    return worker


def _sqs_event(*bodies):
    return {
        "Records": [
            {"messageId": f"m-{i}", "body": body if isinstance(body, str) else json.dumps(body)}
            for i, body in enumerate(bodies)
        ]
    }


def test_worker_checks_each_record(monkeypatch, load_event):
    stub = StubStatusNotifier()
    worker = _reload_worker(monkeypatch, stub)

    resp = worker.lambda_handler(load_event("sqs_status_check_event.json"), None)

    # Invalid JSON record is skipped, not retried
    assert resp == {"batchItemFailures": []}
    assert stub.checked == ["SMYYYYYYYYYYYYYYYYYYYYYYYYYYYYYYY"]


def test_worker_skips_other_channels(monkeypatch):
    stub = StubStatusNotifier()
    worker = _reload_worker(monkeypatch, stub)

    event = _sqs_event(
        {"channel": "http", "recipient": "+1000", "tracking_token": "42"},
        {"channel": "twilio", "recipient": "+1000"},
    )
    resp = worker.lambda_handler(event, None)

    assert resp == {"batchItemFailures": []}
    assert stub.checked == []


def test_worker_survives_lookup_errors(monkeypatch):
    stub = StubStatusNotifier(error=RuntimeError("twilio 404"))
    worker = _reload_worker(monkeypatch, stub)

    event = _sqs_event(
        {"channel": "twilio", "recipient": "+1000", "tracking_token": "SM1"},
        {"channel": "twilio", "recipient": "+1001", "tracking_token": "SM2"},
    )
    resp = worker.lambda_handler(event, None)

    assert resp == {"batchItemFailures": []}
    assert stub.checked == ["SM1", "SM2"]


def test_check_status_returns_channel_status(monkeypatch):
    worker = _reload_worker(monkeypatch, StubStatusNotifier(status="undelivered"))
    assert worker.check_status({"channel": "twilio", "tracking_token": "SM9"}) == "undelivered"


# ---------------------------------------------------------------------------
# Scheduler feeding the worker
# ---------------------------------------------------------------------------

class StubSQS:
    def __init__(self, error=None):
        self.sent = []
        self.error = error

    def send_message(self, QueueUrl, MessageBody, DelaySeconds):
        if self.error:
            raise self.error
        self.sent.append({"QueueUrl": QueueUrl, "MessageBody": MessageBody, "DelaySeconds": DelaySeconds})
        return {"MessageId": "abc"}


def test_scheduler_enqueues_with_delay():
    sqs = StubSQS()
    scheduler = StatusCheckScheduler("https://sqs.example/q", delay_seconds=90, sqs_client=sqs)

    assert scheduler.schedule("twilio", "+1000", "SM1") == "abc"
    assert sqs.sent[0]["DelaySeconds"] == 90
    assert json.loads(sqs.sent[0]["MessageBody"]) == {
        "channel": "twilio",
        "recipient": "+1000",
        "tracking_token": "SM1",
    }


def test_scheduler_disabled_without_queue():
    sqs = StubSQS()
    scheduler = StatusCheckScheduler(None, sqs_client=sqs)
    assert scheduler.enabled is False
    assert scheduler.schedule("twilio", "+1000", "SM1") is None
    assert sqs.sent == []


def test_scheduler_swallows_enqueue_errors():
    scheduler = StatusCheckScheduler("https://sqs.example/q", sqs_client=StubSQS(error=RuntimeError("throttled")))
    assert scheduler.schedule("twilio", "+1000", "SM1") is None
