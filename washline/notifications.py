"""
In-app notifications for Washline.

notify() only adds the row to the current session. The caller commits it
together with the order/claim change that triggered it, so both writes land
in one transaction.
"""

import logging

from washline.extensions import db
from washline.errors import ValidationError
from washline.models import Notification, NOTIFICATION_TYPES

logger = logging.getLogger(__name__)


def short_ref(record_id):
    """Human-friendly reference, e.g. #A1B2C3"""
    return "#{}".format(str(record_id)[-6:].upper()) if record_id else "#N/A"


def notify(user_id, message, notification_type="general", order_id=None):
    """Queue a notification for ``user_id`` on the current session."""
    if notification_type not in NOTIFICATION_TYPES:
        raise ValidationError(
            "Invalid notification type: {}".format(notification_type),
            valid_types=list(NOTIFICATION_TYPES),
        )
    notification = Notification(
        user_id=user_id,
        message=message,
        type=notification_type,
        order_id=order_id,
    )
    db.session.add(notification)
    logger.debug("Queued %s notification for user %s", notification_type, user_id)
    return notification


def notify_order(order, message, notification_type):
    """Notify the owner of ``order``."""
    return notify(order.user_id, message, notification_type, order_id=order.id)
