"""
Authentication routes: registration, login and the caller's profile
"""
import logging

from flask import Blueprint, jsonify, g

from washline.extensions import db, limiter
from washline.auth import hash_password, verify_password, generate_token, require_auth
from washline.errors import ValidationError, AuthenticationError, PermissionDenied
from washline.models import User
from washline.sanitize import sanitize_string, sanitize_dict
from washline.utils import json_body, require_fields
from washline.validators import (
    validate_email, validate_phone, validate_address, MIN_PASSWORD_LENGTH,
)

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)

REGISTER_FIELDS = ['name', 'email', 'password', 'phone', 'address']


def _clean_address(address):
    error = validate_address(address)
    if error:
        raise ValidationError(error)
    return sanitize_dict({
        'street': address['street'],
        'city': address['city'],
        'postal_code': str(address['postal_code']),
    })


@auth_bp.route('/register', methods=['POST'])
@limiter.limit("10 per minute")
def register():
    """
    Register a new customer
    POST /api/auth/register
    Body: {
        "name": "Rahim Uddin",
        "email": "rahim@example.com",
        "password": "secret1",
        "phone": "01712345678",
        "address": {"street": "12 Lake Rd", "city": "Dhaka", "postal_code": "1205"}
    }
    """
    data = json_body()
    require_fields(data, REGISTER_FIELDS)

    email = str(data['email']).lower().strip()
    if not validate_email(email):
        raise ValidationError('Please enter a valid email address')

    if len(str(data['password'])) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            'Password must be at least {} characters long'.format(MIN_PASSWORD_LENGTH)
        )

    phone = str(data['phone']).strip()
    if not validate_phone(phone):
        raise ValidationError('Please enter a valid Bangladeshi phone number')

    address = _clean_address(data['address'])

    if User.query.filter_by(email=email).first():
        raise ValidationError('User with this email already exists')
    if User.query.filter_by(phone=phone).first():
        raise ValidationError('User with this phone number already exists')

    user = User(
        name=sanitize_string(str(data['name'])),
        email=email,
        password_hash=hash_password(str(data['password'])),
        phone=phone,
        address=address,
        role='customer',
    )
    db.session.add(user)
    db.session.commit()
    logger.info("Registered user %s", user.id)

    return jsonify({
        'message': 'User registered successfully',
        'token': generate_token(user),
        'user': user.to_dict()
    }), 201


@auth_bp.route('/login', methods=['POST'])
@limiter.limit("10 per minute")
def login():
    """
    Login user
    POST /api/auth/login
    Body: {"email": "rahim@example.com", "password": "secret1"}
    """
    data = json_body()
    if not data.get('email') or not data.get('password'):
        raise ValidationError('Email and password are required')

    user = User.query.filter_by(email=str(data['email']).lower().strip()).first()
    if not user or not verify_password(str(data['password']), user.password_hash):
        raise AuthenticationError('Invalid email or password')

    if not user.is_active:
        raise PermissionDenied('Account is deactivated. Please contact support.')

    logger.info("User %s logged in", user.id)
    return jsonify({
        'message': 'Login successful',
        'token': generate_token(user),
        'user': user.to_dict()
    }), 200


@auth_bp.route('/profile', methods=['GET'])
@require_auth
def get_profile(user_id):
    return jsonify({'user': g.current_user.to_dict()}), 200


@auth_bp.route('/profile', methods=['PUT'])
@require_auth
def update_profile(user_id):
    """
    Update name, phone and/or address
    PUT /api/auth/profile
    """
    data = json_body()
    user = g.current_user

    if data.get('name'):
        user.name = sanitize_string(str(data['name']))

    if data.get('phone'):
        phone = str(data['phone']).strip()
        if not validate_phone(phone):
            raise ValidationError('Please enter a valid Bangladeshi phone number')
        taken = User.query.filter(User.phone == phone, User.id != user.id).first()
        if taken:
            raise ValidationError('User with this phone number already exists')
        user.phone = phone

    if data.get('address'):
        user.address = _clean_address(data['address'])

    db.session.commit()

    return jsonify({
        'message': 'Profile updated successfully',
        'user': user.to_dict()
    }), 200
