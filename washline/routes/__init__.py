"""
Washline API Route Blueprints
"""
from .auth import auth_bp
from .orders import orders_bp
from .ratings import ratings_bp
from .claims import claims_bp
from .notifications import notifications_bp
from .admin import admin_bp

__all__ = [
    "auth_bp",
    "orders_bp",
    "ratings_bp",
    "claims_bp",
    "notifications_bp",
    "admin_bp",
]
