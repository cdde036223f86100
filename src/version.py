"""
Payment Alert Webhook
=====================

AWS Lambda functions that turn payment-processor webhook events into SMS /
email-to-SMS alerts for the people on call.

Modules in this code root:
- webhook.py        → HTTP endpoint for payment events (/webhook)
- classifier.py     → event → alert decision + message text
- dispatcher.py     → per-recipient fan-out and outcome aggregation
- notifiers/        → email gateway, Twilio and HTTP SMS gateway channels
- status_worker.py  → SQS-triggered delivery-status checks
- status.py         → Twilio delivery status webhook (/twilio/status)
- health.py         → Health and version checks (/healthz, /version)
- utils/            → Shared helpers (logging, config, secrets, event log, ...)

Environment variables are documented in template.yaml.
"""

__version__ = "1.0.0"
__license__ = "MIT"

__all__ = ["__version__"]
