"""
Rating API routes for Washline.
"""
import logging

from flask import Blueprint, jsonify
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from washline.extensions import db
from washline.auth import require_auth
from washline.errors import ValidationError
from washline.models import Order, Rating
from washline.sanitize import clean_text
from washline.utils import json_body, get_owned_or_404

logger = logging.getLogger(__name__)

ratings_bp = Blueprint("ratings", __name__)


def _parse_stars(value):
    if value is None or value == "":
        raise ValidationError("order_id and stars are required")
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ValidationError("stars must be an integer")
    try:
        stars = int(value)
    except ValueError:
        raise ValidationError("stars must be an integer")
    if stars < 1 or stars > 5:
        raise ValidationError("stars must be between 1 and 5")
    return stars


def _find_rating(user_id, order_id):
    return Rating.query.filter_by(user_id=user_id, order_id=order_id).first()


def upsert_rating(user_id, order_id, stars, feedback):
    """Create or overwrite the caller's rating for an order.

    The (user_id, order_id) unique constraint backs this up: if a concurrent
    request inserts first, the IntegrityError is turned into an update.
    """
    rating = _find_rating(user_id, order_id)
    if rating:
        rating.stars = stars
        rating.feedback = feedback
        db.session.commit()
        return rating, False

    rating = Rating(user_id=user_id, order_id=order_id, stars=stars, feedback=feedback)
    db.session.add(rating)
    try:
        db.session.commit()
        return rating, True
    except IntegrityError:
        db.session.rollback()
        logger.info("Rating for order %s by %s inserted concurrently; updating", order_id, user_id)
        rating = Rating.query.filter_by(user_id=user_id, order_id=order_id).one()
        rating.stars = stars
        rating.feedback = feedback
        db.session.commit()
        return rating, False


@ratings_bp.route("", methods=["POST"])
@require_auth
def submit_rating(user_id):
    """
    Submit or update a rating for one of the caller's orders.
    Body JSON: order_id (str), stars (int 1-5), feedback (str, optional)
    """
    data = json_body()
    if not data.get("order_id"):
        raise ValidationError("order_id and stars are required")
    stars = _parse_stars(data.get("stars"))

    feedback = clean_text(data.get("feedback"), "feedback")

    order = get_owned_or_404(Order, data["order_id"], user_id, "Order")
    rating, created = upsert_rating(user_id, order.id, stars, feedback)

    return jsonify({
        "message": "Rating submitted" if created else "Rating updated",
        "rating": rating.to_dict(),
    }), 201 if created else 200


@ratings_bp.route("/order/<order_id>", methods=["GET"])
@require_auth
def get_order_ratings(user_id, order_id):
    """Return all ratings recorded for one of the caller's orders."""
    order = get_owned_or_404(Order, order_id, user_id, "Order")
    ratings = Rating.query.filter_by(order_id=order.id).order_by(Rating.created_at.desc()).all()
    return jsonify({"ratings": [r.to_dict() for r in ratings]}), 200


@ratings_bp.route("/order/<order_id>/average", methods=["GET"])
@require_auth
def get_order_average(user_id, order_id):
    order = get_owned_or_404(Order, order_id, user_id, "Order")
    average, count = (
        db.session.query(func.avg(Rating.stars), func.count(Rating.id))
        .filter(Rating.order_id == order.id)
        .one()
    )
    if not count:
        return jsonify({"average": 0, "count": 0}), 200
    return jsonify({"average": round(float(average), 2), "count": count}), 200


@ratings_bp.route("/order/<order_id>/me", methods=["GET"])
@require_auth
def get_my_rating(user_id, order_id):
    order = get_owned_or_404(Order, order_id, user_id, "Order")
    rating = Rating.query.filter_by(user_id=user_id, order_id=order.id).first()
    return jsonify({"rating": rating.to_dict() if rating else None}), 200
