"""
Order API routes for Washline.
Customers create, repeat, cancel and pay for their own pickup orders.
"""
import logging
from datetime import datetime, timedelta

from flask import Blueprint, request, jsonify, current_app

from washline import lifecycle
from washline.extensions import db
from washline.auth import require_auth
from washline.errors import ValidationError
from washline.models import Order, ORDER_STATUSES
from washline.pricing import calculate_order_price, catalog
from washline.sanitize import clean_text
from washline.utils import json_body, require_fields, get_owned_or_404, paginate_query
from washline.validators import parse_pickup

logger = logging.getLogger(__name__)

orders_bp = Blueprint('orders', __name__)


def _validated_pickup(pickup_date, pickup_time):
    """Return (date, time) strings after checking they name a future moment"""
    pickup_at = parse_pickup(pickup_date, pickup_time)
    if pickup_at is None:
        raise ValidationError('Invalid pickup date or time. Use YYYY-MM-DD and HH:MM')
    if pickup_at <= datetime.now():
        raise ValidationError('Pickup date and time must be in the future')
    return pickup_at.strftime('%Y-%m-%d'), pickup_at.strftime('%H:%M')


@orders_bp.route('/catalog', methods=['GET'])
def get_catalog():
    """Services with their fees and the accepted item types"""
    return jsonify(catalog()), 200


@orders_bp.route('/quote', methods=['POST'])
@require_auth
def get_quote(user_id):
    """
    Price services + items without creating an order
    POST /api/orders/quote
    Body: {"services": ["Washing"], "items": [{"type": "Shirt", "quantity": 2}]}
    """
    data = json_body()
    return jsonify({'quote': calculate_order_price(data.get('services'), data.get('items'))}), 200


@orders_bp.route('', methods=['POST'])
@require_auth
def create_order(user_id):
    """
    Create a new pickup order
    POST /api/orders
    Body: {
        "pickup_date": "2026-10-20",
        "pickup_time": "10:00",
        "address": "12 Lake Rd, Dhaka",
        "services": ["Washing", "Ironing"],
        "items": [{"type": "Shirt", "quantity": 3}]
    }
    """
    data = json_body()
    require_fields(data, ['pickup_date', 'pickup_time', 'address'])
    pickup_date, pickup_time = _validated_pickup(data['pickup_date'], data['pickup_time'])

    order = lifecycle.build_order(
        user_id=user_id,
        pickup_date=pickup_date,
        pickup_time=pickup_time,
        address=clean_text(data['address'], 'address', required=True),
        services=data.get('services'),
        items=data.get('items'),
    )
    db.session.commit()
    logger.info("User %s created order %s (total %s)", user_id, order.id, order.total_amount)

    return jsonify({
        'message': 'Order created successfully',
        'order': order.to_dict()
    }), 201


@orders_bp.route('', methods=['GET'])
@require_auth
def list_orders(user_id):
    orders = Order.query.filter_by(user_id=user_id).order_by(Order.created_at.desc()).all()
    return jsonify({'orders': [o.to_dict() for o in orders]}), 200


@orders_bp.route('/history', methods=['GET'])
@require_auth
def order_history(user_id):
    """
    Paginated order history
    GET /api/orders/history?status=Delivered&page=1&per_page=20
    """
    query = Order.query.filter_by(user_id=user_id)

    status = request.args.get('status')
    if status:
        if status not in ORDER_STATUSES:
            raise ValidationError('Invalid status', valid_statuses=list(ORDER_STATUSES))
        query = query.filter_by(status=status)

    result = paginate_query(query.order_by(Order.created_at.desc()))
    result['orders'] = [o.to_dict() for o in result.pop('items')]
    return jsonify(result), 200


@orders_bp.route('/<order_id>', methods=['GET'])
@require_auth
def get_order(user_id, order_id):
    order = get_owned_or_404(Order, order_id, user_id, 'Order')
    return jsonify({'order': order.to_dict()}), 200


@orders_bp.route('/repeat/<order_id>', methods=['POST'])
@require_auth
def repeat_order(user_id, order_id):
    """
    Place a new order with the same address, services and items
    POST /api/orders/repeat/<order_id>
    Body (optional): {"pickup_date": "2026-10-21", "pickup_time": "09:00"}
    """
    source = get_owned_or_404(Order, order_id, user_id, 'Order')
    data = json_body()

    if data.get('pickup_date') or data.get('pickup_time'):
        require_fields(data, ['pickup_date', 'pickup_time'])
        pickup_date, pickup_time = data['pickup_date'], data['pickup_time']
    else:
        default_at = datetime.now() + timedelta(hours=current_app.config['REPEAT_ORDER_OFFSET_HOURS'])
        pickup_date, pickup_time = default_at.strftime('%Y-%m-%d'), default_at.strftime('%H:%M')
    pickup_date, pickup_time = _validated_pickup(pickup_date, pickup_time)

    order = lifecycle.build_order(
        user_id=user_id,
        pickup_date=pickup_date,
        pickup_time=pickup_time,
        address=source.address,
        services=list(source.services or []),
        items=[{'type': i['type'], 'quantity': i['quantity']} for i in (source.items or [])],
        repeated_from=source,
    )
    db.session.commit()
    logger.info("User %s repeated order %s as %s", user_id, source.id, order.id)

    return jsonify({
        'message': 'Order repeated successfully',
        'order': order.to_dict()
    }), 201


@orders_bp.route('/<order_id>/cancel', methods=['PUT'])
@require_auth
def cancel_order(user_id, order_id):
    order = get_owned_or_404(Order, order_id, user_id, 'Order')
    lifecycle.cancel_order(order)
    db.session.commit()
    return jsonify({
        'message': 'Order cancelled',
        'order': order.to_dict()
    }), 200


@orders_bp.route('/<order_id>/instructions', methods=['PUT'])
@require_auth
def update_instructions(user_id, order_id):
    """
    PUT /api/orders/<order_id>/instructions
    Body: {"instructions": "Ring the bell twice"}
    """
    order = get_owned_or_404(Order, order_id, user_id, 'Order')
    data = json_body()
    instructions = clean_text(data.get('instructions'), 'instructions')

    lifecycle.update_instructions(order, instructions)
    db.session.commit()
    return jsonify({
        'message': 'Instructions updated',
        'order': order.to_dict()
    }), 200


@orders_bp.route('/<order_id>/pay', methods=['POST'])
@require_auth
def initiate_payment(user_id, order_id):
    """
    Start payment
    POST /api/orders/<order_id>/pay
    Body: {"method": "COD" | "Card" | "Wallet"}
    """
    order = get_owned_or_404(Order, order_id, user_id, 'Order')
    data = json_body()
    lifecycle.initiate_payment(order, data.get('method'))
    db.session.commit()

    message = 'Payment completed' if order.is_paid else 'Payment initiated'
    return jsonify({
        'message': message,
        'order': order.to_dict()
    }), 200


@orders_bp.route('/<order_id>/pay', methods=['PUT'])
@require_auth
def confirm_payment(user_id, order_id):
    """
    Confirm a Card/Wallet payment
    PUT /api/orders/<order_id>/pay
    Body: {"transaction_id": "TXN_123"}
    """
    order = get_owned_or_404(Order, order_id, user_id, 'Order')
    data = json_body()
    lifecycle.confirm_payment(order, data.get('transaction_id'))
    db.session.commit()
    return jsonify({
        'message': 'Payment confirmed',
        'order': order.to_dict()
    }), 200
