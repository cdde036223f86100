from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from classifier import Decision
from notifiers.base import BaseNotifier, DeliveryResult, TransportUnavailable
from utils.logger import get_logger

logger = get_logger("dispatcher")

DeliveredHook = Callable[[BaseNotifier, DeliveryResult], Any]


class DispatchOutcome(str, Enum):
    NO_ALERT = "no_alert"
    SUCCESS = "success"
    PARTIAL_FAILURE = "partial_failure"
    FATAL = "fatal"


# HTTP status returned to the webhook caller for each outcome
STATUS_CODES = {
    DispatchOutcome.NO_ALERT: 200,
    DispatchOutcome.SUCCESS: 200,
    DispatchOutcome.PARTIAL_FAILURE: 207,
    DispatchOutcome.FATAL: 500,
}


@dataclass(frozen=True)
class DispatchReport:
    outcome: DispatchOutcome
    results: Tuple[DeliveryResult, ...] = ()
    error: Optional[str] = None

    @property
    def any_failure(self) -> bool:
        if self.outcome is DispatchOutcome.FATAL:
            return True
        return any(not r.success for r in self.results)

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.outcome]

    def to_dict(self) -> Dict[str, Any]:
        if self.outcome is DispatchOutcome.FATAL:
            return {"ok": False, "error": self.error}
        return {
            "ok": not self.any_failure,
            "results": [r.to_dict() for r in self.results],
        }


class Dispatcher:
    """
    Fan an alert out to every configured recipient.

    One failing recipient never stops the others. A TransportUnavailable turns
    the whole dispatch into a single fatal error only when it is raised by
    session() or by the first send; later it is that recipient's failure.
    """

    def __init__(self, notifier: BaseNotifier, recipients: Sequence[str],
                 on_delivered: Optional[DeliveredHook] = None):
        self.notifier = notifier
        self.recipients = tuple(recipients)
        self.on_delivered = on_delivered

    def dispatch(self, decision: Decision) -> DispatchReport:
        if not decision.alert or not self.recipients:
            logger.info(
                "dispatcher.no_alert",
                extra={
                    "event_type": decision.event_type,
                    "alert": decision.alert,
                    "recipient_count": len(self.recipients),
                },
            )
            return DispatchReport(DispatchOutcome.NO_ALERT)

        results: List[DeliveryResult] = []
        try:
            with self.notifier.session():
                for recipient in self.recipients:
                    results.append(self._send_one(recipient, decision.message, first=not results))
        except TransportUnavailable as e:
            logger.error(
                "dispatcher.transport_unavailable",
                extra={"channel": self.notifier.channel_name, "error": str(e)},
            )
            return DispatchReport(DispatchOutcome.FATAL, error=str(e))

        failures = sum(1 for r in results if not r.success)
        outcome = DispatchOutcome.PARTIAL_FAILURE if failures else DispatchOutcome.SUCCESS
        logger.info(
            "dispatcher.done",
            extra={
                "channel": self.notifier.channel_name,
                "event_type": decision.event_type,
                "sent": len(results) - failures,
                "failed": failures,
                "outcome": outcome.value,
            },
        )

        for result in results:
            if result.success and result.tracking_token:
                self._delivered(result)

        return DispatchReport(outcome, tuple(results))

    def _send_one(self, recipient: str, message: str, first: bool) -> DeliveryResult:
        try:
            return self.notifier.send(recipient, message)
        except TransportUnavailable as e:
            # Fatal only while nothing has been delivered or reported yet
            if first:
                raise
            logger.error(
                "dispatcher.transport_lost",
                extra={"channel": self.notifier.channel_name, "to": recipient, "error": str(e)},
            )
            return DeliveryResult.failed(recipient, str(e))
        except Exception as e:
            logger.error(
                "dispatcher.send_error",
                extra={"channel": self.notifier.channel_name, "to": recipient, "error": str(e)},
                exc_info=True,
            )
            return DeliveryResult.failed(recipient, str(e) or e.__class__.__name__)

    def _delivered(self, result: DeliveryResult) -> None:
        if self.on_delivered is None:
            return
        try:
            self.on_delivered(self.notifier, result)
        except Exception as e:
            logger.warning(
                "dispatcher.delivered_hook_error",
                extra={"tracking_token": result.tracking_token, "error": str(e)},
            )
