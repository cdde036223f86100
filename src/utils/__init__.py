"""
Payment Alert Utilities
=======================

Shared helper modules for the payment webhook alerting service:

- logger.py          → structured JSON logging
- config.py          → immutable Settings loaded from the environment
- secrets.py         → AWS Secrets Manager integration
- event_log.py       → append-only raw webhook log
- twilio_client.py   → authenticated Twilio client builder
- status_queue.py    → SQS-delayed delivery-status checks

All functions in this package are stateless and thread-safe, suitable for
AWS Lambda execution.
"""

from utils.logger import get_logger, log

__all__ = [
    "get_logger",
    "log",
]
