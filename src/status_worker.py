import json
from typing import Any, Dict

from notifiers import build_notifier
from utils.config import load_settings
from utils.logger import get_logger

logger = get_logger("status_worker")

# Notifier built once per container from the same configuration as the webhook
settings = load_settings()
notifier = build_notifier(settings)


def check_status(msg: Dict[str, Any]) -> Any:
    """
    Poll the channel for the delivery status of one sent alert.
    """
    token = msg.get("tracking_token")
    if not token:
        raise KeyError("tracking_token")

    channel = msg.get("channel")
    if channel != notifier.channel_name:
        raise ValueError(f"Status check for channel '{channel}' but '{notifier.channel_name}' is configured")

    return notifier.check_delivery_status(token)


def lambda_handler(event, context):
    records = event.get("Records", [])
    logger.info("status_worker.lambda_start: received %d records", len(records))

    for rec in records:
        raw_body = rec.get("body") or ""
        message_id = rec.get("messageId", "<no-id>")

        # 1) Parse JSON from SQS
        try:
            msg = json.loads(raw_body)
        except json.JSONDecodeError:
            logger.warning(
                "status_worker.payload_invalid_json: preview=%s message_id=%s",
                raw_body[:200],
                message_id,
            )
            continue

        # 2) Poll the channel; best effort, only logged
        try:
            status = check_status(msg)
        except Exception as e:
            logger.error(
                "status_worker.check_error: error=%s msg=%s",
                str(e),
                msg,
            )
            continue

        logger.info(
            "status_worker.delivery_status",
            extra={
                "channel": msg.get("channel"),
                "recipient": msg.get("recipient"),
                "tracking_token": msg.get("tracking_token"),
                "status": status,
            },
        )

    # Status checks are never retried
    return {"batchItemFailures": []}
