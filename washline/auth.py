"""
Password hashing, token issuing and the auth decorators used by every blueprint
"""
import logging
from datetime import datetime, timezone
from functools import wraps

import bcrypt
import jwt
from flask import request, current_app, g

from washline.extensions import db
from washline.errors import AuthenticationError, PermissionDenied

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    """Hash a password using bcrypt"""
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash"""
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # Malformed stored hash
        return False


def generate_token(user) -> str:
    """Generate JWT token carrying the user id and role"""
    now = datetime.now(timezone.utc)
    payload = {
        'user_id': user.id,
        'role': user.role,
        'iat': now,
        'exp': now + current_app.config['JWT_ACCESS_TOKEN_EXPIRES'],
    }
    return jwt.encode(
        payload,
        current_app.config['JWT_SECRET_KEY'],
        algorithm=current_app.config['JWT_ALGORITHM']
    )


def decode_token(token: str) -> dict:
    """Decode and verify JWT token"""
    try:
        return jwt.decode(
            token,
            current_app.config['JWT_SECRET_KEY'],
            algorithms=[current_app.config['JWT_ALGORITHM']]
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError('Token has expired')
    except jwt.InvalidTokenError:
        raise AuthenticationError('Invalid token')


def _bearer_token():
    auth_header = request.headers.get('Authorization', '')
    if not auth_header:
        raise AuthenticationError('Missing authorization header')
    parts = auth_header.split(' ')
    if len(parts) != 2 or parts[0].lower() != 'bearer' or not parts[1]:
        raise AuthenticationError('Authorization header must be "Bearer <token>"')
    return parts[1]


def require_auth(f):
    """Decorator to require authentication

    Loads the caller into ``g.current_user`` and passes ``user_id`` to the view.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        from washline.models import User

        payload = decode_token(_bearer_token())
        user = db.session.get(User, payload.get('user_id'))
        if not user:
            raise AuthenticationError('User no longer exists')
        if not user.is_active:
            raise PermissionDenied('Account is deactivated. Please contact support.')

        g.current_user = user
        return f(user_id=user.id, *args, **kwargs)
    return decorated_function


def require_role(*roles):
    """Decorator to require specific role(s); implies require_auth"""
    def decorator(f):
        @wraps(f)
        @require_auth
        def decorated_function(*args, **kwargs):
            if g.current_user.role not in roles:
                logger.warning("User %s denied access to %s", g.current_user.id, request.path)
                raise PermissionDenied('Forbidden: {} only'.format(' or '.join(roles)))
            return f(*args, **kwargs)
        return decorated_function
    return decorator


require_admin = require_role('admin')
