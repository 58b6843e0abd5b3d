"""
Admin API routes for Washline.
Protected by role-based access (admin only); no ownership scoping.
"""
import logging

from flask import Blueprint, request, jsonify
from sqlalchemy import func

from washline import lifecycle
from washline.extensions import db
from washline.auth import require_admin
from washline.errors import ValidationError, NotFound, PolicyError
from washline.models import User, Order, Rating, Claim, Notification, ORDER_STATUSES, CLAIM_STATUSES
from washline.routes.claims import resolve_claim
from washline.utils import json_body, paginate_query

logger = logging.getLogger(__name__)

admin_bp = Blueprint("admin", __name__)

ACTIVE_ORDER_STATUSES = ("Pending", "Confirmed", "Washing")


@admin_bp.route("/orders", methods=["GET"])
@require_admin
def list_orders(user_id):
    """All orders, optionally filtered by ?status=, paginated."""
    query = Order.query

    status = request.args.get("status")
    if status:
        if status not in ORDER_STATUSES:
            raise ValidationError("Invalid status", valid_statuses=list(ORDER_STATUSES))
        query = query.filter_by(status=status)

    result = paginate_query(query.order_by(Order.created_at.desc()))
    result["orders"] = [o.to_dict(include_user=True) for o in result.pop("items")]
    return jsonify(result), 200


@admin_bp.route("/orders/<order_id>/status", methods=["PUT"])
@require_admin
def update_order_status(user_id, order_id):
    """
    Set any status on any order
    Body JSON: status (Pending | Confirmed | Washing | Delivered | Cancelled)
    """
    data = json_body()
    order = db.session.get(Order, order_id)
    if not order:
        raise NotFound("Order not found")

    lifecycle.admin_set_status(order, data.get("status"))
    db.session.commit()
    return jsonify({"message": "Order status updated", "order": order.to_dict(include_user=True)}), 200


@admin_bp.route("/users", methods=["GET"])
@require_admin
def list_users(user_id):
    users = User.query.order_by(User.created_at.desc()).all()
    return jsonify({"users": [u.to_dict() for u in users]}), 200


@admin_bp.route("/users/<target_id>", methods=["DELETE"])
@require_admin
def delete_user(user_id, target_id):
    """Delete a user together with their orders, ratings, claims and notifications."""
    if target_id == user_id:
        raise PolicyError("Admins cannot delete their own account")

    user = db.session.get(User, target_id)
    if not user:
        raise NotFound("User not found")

    # Children first so foreign keys hold on every backend
    order_ids = [oid for (oid,) in db.session.query(Order.id).filter_by(user_id=target_id)]
    Notification.query.filter(
        (Notification.user_id == target_id) | Notification.order_id.in_(order_ids)
    ).delete(synchronize_session=False)
    Rating.query.filter(
        (Rating.user_id == target_id) | Rating.order_id.in_(order_ids)
    ).delete(synchronize_session=False)
    Claim.query.filter(
        (Claim.user_id == target_id) | Claim.order_id.in_(order_ids)
    ).delete(synchronize_session=False)
    Order.query.filter_by(user_id=target_id).delete(synchronize_session=False)
    db.session.delete(user)
    db.session.commit()

    logger.info("Admin %s deleted user %s", user_id, target_id)
    return jsonify({"message": "User deleted"}), 200


@admin_bp.route("/stats", methods=["GET"])
@require_admin
def stats(user_id):
    """Aggregate dashboard statistics."""
    average, ratings_count = db.session.query(func.avg(Rating.stars), func.count(Rating.id)).one()

    return jsonify({
        "stats": {
            "total_users": User.query.count(),
            "total_orders": Order.query.count(),
            "active_orders": Order.query.filter(Order.status.in_(ACTIVE_ORDER_STATUSES)).count(),
            "delivered_orders": Order.query.filter_by(status="Delivered").count(),
            "pending_claims": Claim.query.filter_by(status="Pending").count(),
            "average_rating": round(float(average), 2) if ratings_count else 0,
            "ratings_count": ratings_count,
        },
    }), 200


@admin_bp.route("/ratings", methods=["GET"])
@require_admin
def list_ratings(user_id):
    ratings = Rating.query.order_by(Rating.created_at.desc()).all()
    return jsonify({"ratings": [r.to_dict(include_user=True) for r in ratings]}), 200


@admin_bp.route("/ratings/<rating_id>", methods=["DELETE"])
@require_admin
def delete_rating(user_id, rating_id):
    rating = db.session.get(Rating, rating_id)
    if not rating:
        raise NotFound("Rating not found")
    db.session.delete(rating)
    db.session.commit()
    return jsonify({"message": "Rating deleted"}), 200


@admin_bp.route("/claims", methods=["GET"])
@require_admin
def list_claims(user_id):
    query = Claim.query
    status = request.args.get("status")
    if status:
        if status not in CLAIM_STATUSES:
            raise ValidationError("Invalid status", valid_statuses=list(CLAIM_STATUSES))
        query = query.filter_by(status=status)

    claims = query.order_by(Claim.created_at.desc()).all()
    return jsonify({"claims": [c.to_dict(include_user=True) for c in claims]}), 200


@admin_bp.route("/claims/<claim_id>", methods=["PUT"])
@require_admin
def update_claim(user_id, claim_id):
    claim = resolve_claim(claim_id, json_body())
    return jsonify({"message": "Claim updated", "claim": claim.to_dict(include_user=True)}), 200
