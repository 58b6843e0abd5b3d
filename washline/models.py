"""
Washline SQLAlchemy Models
All database entities for the laundry pickup service.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column, String, Boolean, Integer, Text, DateTime, ForeignKey, JSON,
    CheckConstraint, UniqueConstraint, Index
)
from sqlalchemy.orm import relationship

from washline.extensions import db


def generate_uuid():
    return str(uuid.uuid4())


def utcnow():
    return datetime.now(timezone.utc)


def _iso(value):
    return value.isoformat() if value else None


ORDER_STATUSES = ("Pending", "Confirmed", "Washing", "Delivered", "Cancelled")
PAYMENT_METHODS = ("COD", "Card", "Wallet")
PAYMENT_STATUSES = ("Pending", "Paid")
CLAIM_STATUSES = ("Pending", "Approved", "Rejected")
NOTIFICATION_TYPES = ("pickup_reminder", "status_update", "delivery_alert", "payment", "general")
USER_ROLES = ("customer", "admin")


# ---------------------------------------------------------------------------
# User
# ---------------------------------------------------------------------------
class User(db.Model):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    phone = Column(String(20), unique=True, nullable=False, index=True)
    address = Column(JSON, nullable=False, default=dict)  # {street, city, postal_code}
    is_active = Column(Boolean, nullable=False, default=True)
    role = Column(String(20), nullable=False, default="customer")

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    orders = relationship("Order", back_populates="user", lazy="dynamic", cascade="all, delete-orphan")
    ratings = relationship("Rating", back_populates="user", lazy="dynamic", cascade="all, delete-orphan")
    claims = relationship("Claim", back_populates="user", lazy="dynamic", cascade="all, delete-orphan")
    notifications = relationship("Notification", back_populates="user", lazy="dynamic", cascade="all, delete-orphan")

    def __repr__(self):
        return f'<User {self.email} ({self.role})>'

    def is_admin(self):
        return self.role == "admin"

    def summary(self):
        return {"id": self.id, "name": self.name, "email": self.email}

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "is_active": self.is_active,
            "role": self.role,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


# ---------------------------------------------------------------------------
# Order
# ---------------------------------------------------------------------------
class Order(db.Model):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    pickup_date = Column(String(10), nullable=False)  # YYYY-MM-DD
    pickup_time = Column(String(5), nullable=False)   # HH:MM
    address = Column(Text, nullable=False)
    services = Column(JSON, nullable=False, default=list)
    items = Column(JSON, nullable=False, default=list)  # [{type, quantity, price}]
    total_amount = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default="Pending")
    instructions = Column(Text, nullable=False, default="")

    # Embedded payment record
    payment_method = Column(String(20), nullable=True)
    payment_status = Column(String(20), nullable=False, default="Pending")
    transaction_id = Column(String(255), nullable=True)
    paid_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="orders")

    __table_args__ = (
        CheckConstraint("total_amount >= 0", name="ck_orders_total_non_negative"),
        Index("idx_orders_user_created", "user_id", "created_at"),
        Index("idx_orders_status", "status"),
    )

    def __repr__(self):
        return f'<Order {self.id} {self.status}>'

    @property
    def is_paid(self):
        return self.payment_status == "Paid"

    def payment_dict(self):
        return {
            "method": self.payment_method,
            "status": self.payment_status,
            "transaction_id": self.transaction_id,
            "paid_at": _iso(self.paid_at),
        }

    def to_dict(self, include_user=False):
        data = {
            "id": self.id,
            "user_id": self.user_id,
            "pickup_date": self.pickup_date,
            "pickup_time": self.pickup_time,
            "address": self.address,
            "services": self.services or [],
            "items": self.items or [],
            "total_amount": self.total_amount,
            "status": self.status,
            "instructions": self.instructions or "",
            "payment": self.payment_dict(),
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }
        if include_user:
            data["user"] = self.user.summary() if self.user else None
        return data


# ---------------------------------------------------------------------------
# Rating
# ---------------------------------------------------------------------------
class Rating(db.Model):
    __tablename__ = "ratings"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    order_id = Column(String(36), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    stars = Column(Integer, nullable=False)
    feedback = Column(Text, nullable=False, default="")

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="ratings")

    __table_args__ = (
        UniqueConstraint("user_id", "order_id", name="uq_ratings_user_order"),
        CheckConstraint("stars >= 1 AND stars <= 5", name="ck_ratings_stars_range"),
    )

    def to_dict(self, include_user=False):
        data = {
            "id": self.id,
            "user_id": self.user_id,
            "order_id": self.order_id,
            "stars": self.stars,
            "feedback": self.feedback or "",
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }
        if include_user:
            data["user"] = self.user.summary() if self.user else None
        return data


# ---------------------------------------------------------------------------
# Claim
# ---------------------------------------------------------------------------
class Claim(db.Model):
    __tablename__ = "claims"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    order_id = Column(String(36), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    description = Column(Text, nullable=False)
    photo_url = Column(Text, nullable=False, default="")
    status = Column(String(20), nullable=False, default="Pending")
    admin_response = Column(Text, nullable=False, default="")

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="claims")

    def to_dict(self, include_user=False):
        data = {
            "id": self.id,
            "user_id": self.user_id,
            "order_id": self.order_id,
            "description": self.description,
            "photo_url": self.photo_url or "",
            "status": self.status,
            "admin_response": self.admin_response or "",
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }
        if include_user:
            data["user"] = self.user.summary() if self.user else None
        return data


# ---------------------------------------------------------------------------
# Notification
# ---------------------------------------------------------------------------
class Notification(db.Model):
    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String(30), nullable=False, default="general")
    is_read = Column(Boolean, nullable=False, default=False)
    order_id = Column(String(36), ForeignKey("orders.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, default=utcnow)

    user = relationship("User", back_populates="notifications")

    __table_args__ = (
        Index("idx_notifications_user_created", "user_id", "created_at"),
        Index("idx_notifications_unread", "user_id", "is_read"),
    )

    def __repr__(self):
        return f'<Notification {self.type} - user={self.user_id}>'

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "message": self.message,
            "type": self.type,
            "is_read": self.is_read,
            "order_id": self.order_id,
            "created_at": _iso(self.created_at),
        }
