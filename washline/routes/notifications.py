"""
In-app notification routes for Washline.
"""
import logging

from flask import Blueprint, jsonify, current_app

from washline.extensions import db
from washline.auth import require_auth, require_admin
from washline.errors import NotFound
from washline.models import Notification, Order, User
from washline.notifications import notify
from washline.sanitize import clean_text
from washline.utils import json_body, require_fields, get_owned_or_404

logger = logging.getLogger(__name__)

notifications_bp = Blueprint("notifications", __name__)


@notifications_bp.route("", methods=["GET"])
@require_auth
def list_notifications(user_id):
    """Most recent notifications for the caller, newest first."""
    notifications = (
        Notification.query
        .filter_by(user_id=user_id)
        .order_by(Notification.created_at.desc())
        .limit(current_app.config["NOTIFICATION_LIST_LIMIT"])
        .all()
    )
    return jsonify({"notifications": [n.to_dict() for n in notifications]}), 200


@notifications_bp.route("/unread-count", methods=["GET"])
@require_auth
def unread_count(user_id):
    count = Notification.query.filter_by(user_id=user_id, is_read=False).count()
    return jsonify({"unread_count": count}), 200


@notifications_bp.route("", methods=["POST"])
@require_admin
def create_notification(user_id):
    """
    Send a notification to any user (system use)
    Body JSON: user_id (str), message (str), type (str, optional), order_id (str, optional)
    """
    data = json_body()
    require_fields(data, ["user_id", "message"])
    message = clean_text(data["message"], "message", required=True)

    recipient = db.session.get(User, data["user_id"])
    if not recipient:
        raise NotFound("User not found")

    order_id = None
    if data.get("order_id"):
        order_id = get_owned_or_404(Order, data["order_id"], recipient.id, "Order").id

    notification = notify(recipient.id, message, data.get("type") or "general", order_id=order_id)
    db.session.commit()
    logger.info("Admin %s sent %s notification to %s", user_id, notification.type, recipient.id)

    return jsonify({"message": "Notification created", "notification": notification.to_dict()}), 201


@notifications_bp.route("/mark-all-read", methods=["PUT"])
@require_auth
def mark_all_read(user_id):
    updated = (
        Notification.query
        .filter_by(user_id=user_id, is_read=False)
        .update({"is_read": True}, synchronize_session=False)
    )
    db.session.commit()
    return jsonify({"message": "All notifications marked as read", "updated": updated}), 200


@notifications_bp.route("/<notification_id>/read", methods=["PUT"])
@require_auth
def mark_read(user_id, notification_id):
    notification = get_owned_or_404(Notification, notification_id, user_id, "Notification")
    notification.is_read = True
    db.session.commit()
    return jsonify({"message": "Notification marked as read", "notification": notification.to_dict()}), 200


@notifications_bp.route("/<notification_id>", methods=["DELETE"])
@require_auth
def delete_notification(user_id, notification_id):
    notification = get_owned_or_404(Notification, notification_id, user_id, "Notification")
    db.session.delete(notification)
    db.session.commit()
    return jsonify({"message": "Notification deleted"}), 200
