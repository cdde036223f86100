import base64
import json
from typing import Any, Dict

from classifier import classify
from dispatcher import Dispatcher, DispatchOutcome
from notifiers import BaseNotifier, DeliveryResult, build_notifier
from utils.config import load_settings
from utils.event_log import append_event
from utils.logger import get_logger
from utils.status_queue import StatusCheckScheduler

logger = get_logger("webhook")

# Configuration, notifier and SQS scheduler are built once per container
settings = load_settings()
notifier = build_notifier(settings)
status_scheduler = StatusCheckScheduler(
    settings.status_queue_url,
    delay_seconds=settings.status_check_delay_seconds,
    region_name=settings.region,
)


def _schedule_status_check(sender: BaseNotifier, result: DeliveryResult) -> None:
    if not sender.supports_status_check:
        return
    status_scheduler.schedule(sender.channel_name, result.recipient, result.tracking_token)


dispatcher = Dispatcher(notifier, settings.recipients, on_delivered=_schedule_status_check)


def _json_response(status_code: int, body: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body),
    }


def _text_response(status_code: int, text: str) -> Dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "text/plain; charset=utf-8"},
        "body": text,
    }


def _raw_body(event: dict) -> Any:
    """
    Extract the request body from the Lambda event.

    - For API Gateway / HttpApi: event["body"] is a string, base64-encoded
      when isBase64Encoded is set.
    - For direct tests: event["body"] may already be a dict, or the event
      itself is the payload.
    """
    body = event.get("body")

    if isinstance(body, str):
        if event.get("isBase64Encoded"):
            return base64.b64decode(body).decode("utf-8")
        return body
    if isinstance(body, dict):
        return body

    # Fallback: treat the whole event as the payload for local tests
    return event


def lambda_handler(event, context):
    logger.info(
        "webhook.lambda_start",
        extra={"request_id": getattr(context, "aws_request_id", None)},
    )

    # 1) Parse JSON body
    try:
        raw = _raw_body(event)
        payload = json.loads(raw) if isinstance(raw, str) else raw
    except (ValueError, TypeError) as e:
        preview = str(event.get("body"))[:200]
        logger.warning("webhook.invalid_json", extra={"body_preview": preview, "error": str(e)})
        append_event(event.get("body"), settings.log_path)
        return _json_response(400, {"error": "invalid_json"})

    # 2) Record the raw event before anything can fail
    append_event(payload, settings.log_path)
    logger.info("webhook.payload_received", extra={"payload": payload})

    # 3) Classify (never raises) and dispatch
    decision = classify(payload)
    logger.info(
        "webhook.classified",
        extra={"event_type": decision.event_type, "alert": decision.alert},
    )

    try:
        report = dispatcher.dispatch(decision)
    except Exception as e:
        logger.error(
            "webhook.dispatch_error",
            extra={"event_type": decision.event_type, "error": str(e)},
            exc_info=True,
        )
        return _json_response(500, {"ok": False, "error": "internal_error"})

    if report.outcome is DispatchOutcome.NO_ALERT:
        return _text_response(200, f"No alert triggered. Event: {decision.event_type}")

    logger.info(
        "webhook.dispatched",
        extra={
            "event_type": decision.event_type,
            "outcome": report.outcome.value,
            "status_code": report.status_code,
        },
    )
    return _json_response(report.status_code, report.to_dict())
