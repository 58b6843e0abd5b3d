"""
Damage claim routes for Washline.
Customers file claims against their own orders; admins resolve them.
"""
import logging

from flask import Blueprint, jsonify

from washline.extensions import db
from washline.auth import require_auth, require_admin
from washline.errors import ValidationError, NotFound
from washline.models import Claim, Order, CLAIM_STATUSES
from washline.notifications import notify, short_ref
from washline.sanitize import clean_text
from washline.utils import json_body, get_owned_or_404

logger = logging.getLogger(__name__)

claims_bp = Blueprint("claims", __name__)


def resolve_claim(claim_id, data):
    """Apply an admin decision to a claim and notify its owner.

    Body keys: status (Pending | Approved | Rejected), admin_response (str).
    Rejections need a non-empty admin_response.
    """
    status = data.get("status")
    admin_response = data.get("admin_response")

    if status and status not in CLAIM_STATUSES:
        raise ValidationError("Invalid status", valid_statuses=list(CLAIM_STATUSES))
    if admin_response is not None:
        admin_response = clean_text(admin_response, "admin_response")

    claim = db.session.get(Claim, claim_id)
    if not claim:
        raise NotFound("Claim not found")

    if status == "Rejected" and not (admin_response or "").strip():
        raise ValidationError("Rejection reason is required")

    if status:
        claim.status = status
    if admin_response is not None:
        claim.admin_response = admin_response

    if status == "Approved":
        message = "Your damage claim for order {} has been approved.".format(short_ref(claim.order_id))
        if claim.admin_response:
            message += " Note: {}".format(claim.admin_response)
        notify(claim.user_id, message, "status_update", order_id=claim.order_id)
    elif status == "Rejected":
        message = "Your damage claim for order {} has been rejected. Reason: {}".format(
            short_ref(claim.order_id), claim.admin_response)
        notify(claim.user_id, message, "status_update", order_id=claim.order_id)

    db.session.commit()
    logger.info("Claim %s set to %s", claim.id, claim.status)
    return claim


@claims_bp.route("", methods=["POST"])
@require_auth
def create_claim(user_id):
    """
    File a damage claim
    Body JSON: order_id (str), description (str), photo_url (str, optional)
    """
    data = json_body()
    if not data.get("order_id"):
        raise ValidationError("order_id and description are required")
    description = clean_text(data.get("description"), "description", required=True)

    photo_url = data.get("photo_url") or ""
    if not isinstance(photo_url, str):
        raise ValidationError("photo_url must be a string")

    order = get_owned_or_404(Order, data["order_id"], user_id, "Order")

    claim = Claim(
        user_id=user_id,
        order_id=order.id,
        description=description,
        photo_url=photo_url.strip(),
        status="Pending",
    )
    db.session.add(claim)
    db.session.commit()
    logger.info("User %s filed claim %s on order %s", user_id, claim.id, order.id)

    return jsonify({"message": "Claim submitted", "claim": claim.to_dict()}), 201


@claims_bp.route("/me", methods=["GET"])
@require_auth
def get_my_claims(user_id):
    claims = Claim.query.filter_by(user_id=user_id).order_by(Claim.created_at.desc()).all()
    return jsonify({"claims": [c.to_dict() for c in claims]}), 200


@claims_bp.route("/order/<order_id>", methods=["GET"])
@require_auth
def get_claims_for_order(user_id, order_id):
    claims = (
        Claim.query
        .filter_by(user_id=user_id, order_id=order_id)
        .order_by(Claim.created_at.desc())
        .all()
    )
    return jsonify({"claims": [c.to_dict() for c in claims]}), 200


@claims_bp.route("/<claim_id>", methods=["PUT"])
@require_admin
def update_claim_status(user_id, claim_id):
    claim = resolve_claim(claim_id, json_body())
    return jsonify({"message": "Claim updated", "claim": claim.to_dict()}), 200
