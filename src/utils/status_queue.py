import json
from typing import Any, Dict, Optional

import boto3

from utils.logger import get_logger

logger = get_logger("status_queue")


class StatusCheckScheduler:
    """
    Enqueue delayed delivery-status checks on SQS.

    The status worker picks the message up after ``delay_seconds`` and polls
    the channel; nothing here waits for it. Enqueue failures are logged and
    swallowed because the webhook response does not depend on them.
    """

    def __init__(self, queue_url: Optional[str], delay_seconds: int = 60,
                 region_name: str = "us-east-1", sqs_client=None):
        self.queue_url = queue_url
        self.delay_seconds = delay_seconds
        self.region_name = region_name
        self._sqs = sqs_client

    @property
    def enabled(self) -> bool:
        return bool(self.queue_url)

    @property
    def sqs(self):
        # Created on first use and reused across invocations
        if self._sqs is None:
            self._sqs = boto3.client("sqs", region_name=self.region_name)
        return self._sqs

    def schedule(self, channel: str, recipient: str, tracking_token: str) -> Optional[str]:
        """
        Enqueue one status check. Returns the SQS MessageId, or None when the
        queue is not configured or the enqueue failed.
        """
        if not self.enabled:
            logger.debug(
                "status_queue.disabled",
                extra={"channel": channel, "tracking_token": tracking_token},
            )
            return None

        body: Dict[str, Any] = {
            "channel": channel,
            "recipient": recipient,
            "tracking_token": tracking_token,
        }

        try:
            resp = self.sqs.send_message(
                QueueUrl=self.queue_url,
                MessageBody=json.dumps(body),
                DelaySeconds=self.delay_seconds,
            )
        except Exception as e:
            logger.warning(
                "status_queue.enqueue_error",
                extra={"error": str(e), "tracking_token": tracking_token},
            )
            return None

        message_id = resp.get("MessageId")
        logger.info(
            "status_queue.enqueued",
            extra={
                "message_id": message_id,
                "channel": channel,
                "tracking_token": tracking_token,
                "delay_seconds": self.delay_seconds,
            },
        )
        return message_id
