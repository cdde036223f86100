import base64
import json
from urllib.parse import parse_qs

from utils.logger import get_logger, log

logger = get_logger("twilio-status")

# Twilio statuses that mean the alert did not reach the phone
FAILED_STATUSES = {"failed", "undelivered"}


def lambda_handler(event, context):
    # Body from API Gateway HTTP API (v2), form-encoded by Twilio
    raw_body = event.get("body") or ""
    if event.get("isBase64Encoded"):
        raw_body = base64.b64decode(raw_body).decode("utf-8", errors="replace")
    parsed = parse_qs(raw_body)

    # Flatten: {'MessageSid': ['SM...']} → {'MessageSid': 'SM...'}
    data = {k: v[0] for k, v in parsed.items() if v}

    message_sid = data.get("MessageSid")
    message_status = data.get("MessageStatus") or data.get("SmsStatus")

    if message_status in FAILED_STATUSES:
        logger.warning(
            "twilio.status_failed",
            extra={
                "message_sid": message_sid,
                "to": data.get("To"),
                "error_code": data.get("ErrorCode"),
            },
        )

    log(
        "twilio.status",
        message_sid=message_sid,
        message_status=message_status,
        raw=data,
    )

    # We don't block Twilio on internal errors; just acknowledge receipt.
    return {
        "statusCode": 200,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps({"ok": True}),
    }
