"""
User Models

Minimal account and subscription tables consumed by the auth and
subscription collaborators. Registration and billing live elsewhere.
"""

from .base import db, utcnow


class User(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    name = db.Column(db.String(100), nullable=True)
    role = db.Column(db.String(20), default='user', nullable=False)  # 'user' or 'admin'
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)


class Subscription(db.Model):
    """Premium entitlement. Active while status == 'active' and end_date is unset or in the future."""
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='CASCADE'), nullable=False, index=True)
    plan_name = db.Column(db.String(50), default='Premium')
    status = db.Column(db.String(20), default='active', nullable=False)
    start_date = db.Column(db.DateTime, default=utcnow, nullable=False)
    end_date = db.Column(db.DateTime, nullable=True)
