"""
Order and payment lifecycle.

Customers move an order along a fixed graph:

    Pending -> Confirmed -> Washing -> Delivered
    Pending -> Cancelled

Admins may set any status directly (last write wins). Each successful state
change queues exactly one notification for the order owner; callers commit.
"""

import logging

from washline.extensions import db
from washline.errors import PolicyError, ValidationError
from washline.models import Order, ORDER_STATUSES, PAYMENT_METHODS, utcnow
from washline.notifications import notify_order, short_ref
from washline.pricing import calculate_order_price

logger = logging.getLogger(__name__)

VALID_STATUS_TRANSITIONS = {
    "Pending": ["Confirmed", "Cancelled"],
    "Confirmed": ["Washing"],
    "Washing": ["Delivered"],
    "Delivered": [],
    "Cancelled": [],
}

DEFERRED_PAYMENT_METHODS = ("Card", "Wallet")


def can_transition(current, new_status):
    return new_status in VALID_STATUS_TRANSITIONS.get(current, [])


def _transition(order, new_status):
    if not can_transition(order.status, new_status):
        raise PolicyError(
            "Cannot change order status from {} to {}".format(order.status, new_status),
            allowed=VALID_STATUS_TRANSITIONS.get(order.status, []),
        )
    logger.info("Order %s: %s -> %s", order.id, order.status, new_status)
    order.status = new_status


def _require_pending(order, action):
    if order.status != "Pending":
        raise PolicyError(
            "Only pending orders can be {} (current status: {})".format(action, order.status)
        )


def build_order(user_id, pickup_date, pickup_time, address, services, items, repeated_from=None):
    """Price and create a new Pending order and queue its notification.

    Pricing runs first, so invalid input never produces a partial record.
    """
    priced = calculate_order_price(services, items)
    order = Order(
        user_id=user_id,
        pickup_date=pickup_date,
        pickup_time=pickup_time,
        address=address,
        services=priced["services"],
        items=priced["items"],
        total_amount=priced["total_amount"],
        status="Pending",
        instructions="",
        payment_status="Pending",
    )
    db.session.add(order)
    # Assign the primary key now so the notification can reference it
    db.session.flush()

    if repeated_from is not None:
        message = "Your repeat of order {} is scheduled for pickup on {} at {}.".format(
            short_ref(repeated_from.id), pickup_date, pickup_time)
    else:
        message = "Your order {} is scheduled for pickup on {} at {}.".format(
            short_ref(order.id), pickup_date, pickup_time)
    notify_order(order, message, "pickup_reminder")
    return order


def cancel_order(order):
    _require_pending(order, "cancelled")
    _transition(order, "Cancelled")
    notify_order(order, "Your order {} has been cancelled.".format(short_ref(order.id)), "status_update")
    return order


def update_instructions(order, instructions):
    """Replace the free-text instructions; no notification."""
    _require_pending(order, "edited")
    order.instructions = instructions or ""
    return order


def initiate_payment(order, method):
    """Start payment. COD is trusted immediately and confirms the order."""
    if method not in PAYMENT_METHODS:
        raise ValidationError(
            "Invalid payment method: {}".format(method),
            valid_methods=list(PAYMENT_METHODS),
        )
    if order.is_paid:
        raise PolicyError("Order is already paid")
    _require_pending(order, "paid")

    order.payment_method = method
    if method == "COD":
        order.payment_status = "Paid"
        order.paid_at = utcnow()
        _transition(order, "Confirmed")
        message = "Cash on delivery selected for order {}. Your order is confirmed.".format(short_ref(order.id))
    else:
        order.payment_status = "Pending"
        message = "{} payment initiated for order {}. Awaiting confirmation.".format(method, short_ref(order.id))

    notify_order(order, message, "payment")
    return order


def confirm_payment(order, transaction_id):
    """Complete a Card/Wallet payment with the processor's transaction id."""
    if not transaction_id or not str(transaction_id).strip():
        raise ValidationError("transaction_id is required")
    if order.is_paid:
        raise PolicyError("Order is already paid")
    if order.payment_method not in DEFERRED_PAYMENT_METHODS:
        raise PolicyError("Payment has not been initiated for this order")
    _require_pending(order, "paid")

    order.payment_status = "Paid"
    order.transaction_id = str(transaction_id).strip()
    order.paid_at = utcnow()
    _transition(order, "Confirmed")
    notify_order(
        order,
        "Payment received for order {}. Your order is confirmed.".format(short_ref(order.id)),
        "payment",
    )
    return order


def admin_set_status(order, new_status):
    """Set any status without checking the transition graph."""
    if new_status not in ORDER_STATUSES:
        raise ValidationError("Invalid status", valid_statuses=list(ORDER_STATUSES))
    if order.status == new_status:
        return order

    logger.info("Order %s: %s -> %s (admin)", order.id, order.status, new_status)
    order.status = new_status
    notification_type = "delivery_alert" if new_status == "Delivered" else "status_update"
    notify_order(
        order,
        "Your order {} is now {}.".format(short_ref(order.id), new_status),
        notification_type,
    )
    return order
