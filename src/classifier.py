from dataclasses import dataclass
from decimal import MAX_EMAX, MIN_EMIN, Decimal, InvalidOperation, localcontext
from typing import Any, Callable, Dict, Mapping

UNKNOWN = "UNKNOWN"

# Payment statuses that always alert
ALERT_PAYMENT_STATUSES = frozenset({"VOIDED", "REFUNDED", "DISPUTED", "CANCELED"})

# Largest exponent of the major amount rendered in fixed-point (16 integer digits)
MAX_FIXED_EXPONENT = 15


@dataclass(frozen=True)
class Decision:
    alert: bool
    message: str
    event_type: str = "unknown"


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _text(value: Any, default: str) -> str:
    if value is None or value == "":
        return default
    return str(value)


def _minor_units(money: Any) -> Decimal:
    """Amount in minor units (cents) from an ``amount_money`` object; 0 if unusable."""
    amount = _mapping(money).get("amount")
    if amount is None or isinstance(amount, bool):
        return Decimal(0)
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        return Decimal(0)
    if not value.is_finite():
        return Decimal(0)
    return value


def format_amount(minor_units: Decimal) -> str:
    """Minor units to major units with exactly two decimals (1050 -> "10.50")."""
    with localcontext() as ctx:
        ctx.Emax, ctx.Emin = MAX_EMAX, MIN_EMIN
        major = minor_units.scaleb(-2)
    # Keep absurd magnitudes from filling the SMS with digits
    if major.adjusted() > MAX_FIXED_EXPONENT:
        return f"{major:.2E}"
    return f"{major:.2f}"


def _event_object(envelope: Mapping[str, Any]) -> Mapping[str, Any]:
    return _mapping(_mapping(envelope.get("data")).get("object"))


def _payment(event_type: str, obj: Mapping[str, Any]) -> Decision:
    payment = _mapping(obj.get("payment"))
    cents = _minor_units(payment.get("amount_money"))
    status = _text(payment.get("status"), UNKNOWN).upper()
    receipt = _text(payment.get("receipt_number"), UNKNOWN)

    if status in ALERT_PAYMENT_STATUSES or cents == 0:
        return Decision(
            alert=True,
            message=f"Receipt #{receipt} was {status} for ${format_amount(cents)}.",
            event_type=event_type,
        )
    return _no_action(event_type, obj)


def _refund(event_type: str, obj: Mapping[str, Any]) -> Decision:
    refund = _mapping(obj.get("refund"))
    refund_id = _text(refund.get("id"), UNKNOWN)
    amount = format_amount(_minor_units(refund.get("amount_money")))
    return Decision(True, f"Refund {refund_id} created for ${amount}.", event_type)


def _dispute(event_type: str, obj: Mapping[str, Any]) -> Decision:
    dispute = _mapping(obj.get("dispute"))
    dispute_id = _text(dispute.get("id"), UNKNOWN)
    reason = _text(dispute.get("reason"), UNKNOWN)
    status = _text(dispute.get("status"), "PENDING")
    return Decision(True, f"Dispute {dispute_id}. Reason: {reason}. Status: {status}.", event_type)


def _order(event_type: str, obj: Mapping[str, Any]) -> Decision:
    order_id = _text(_mapping(obj.get("order")).get("id"), UNKNOWN)
    return Decision(True, f"New order created: {order_id}.", event_type)


def _no_action(event_type: str, obj: Mapping[str, Any]) -> Decision:
    return Decision(False, f"No action for event type: {event_type}", event_type)


# Supported rules by event type
EVENT_RULES: Dict[str, Callable[[str, Mapping[str, Any]], Decision]] = {
    "payment.created": _payment,
    "payment.updated": _payment,
    "refund.created": _refund,
    "dispute.created": _dispute,
    "dispute.updated": _dispute,
    "order.created": _order,
}


def classify(envelope: Any) -> Decision:
    """
    Map a webhook envelope to an alert decision.

    Never raises: missing or malformed fields fall back to UNKNOWN / zero /
    empty defaults, and unrecognized event types produce ``alert=False``.
    """
    envelope = _mapping(envelope)
    event_type = _text(envelope.get("type"), "unknown")
    rule = EVENT_RULES.get(event_type, _no_action)
    return rule(event_type, _event_object(envelope))
