"""
Subscription Service

Premium entitlement check used to gate monetization fields.
"""

from models import db, Subscription, utcnow


def has_active_premium(actor_id):
    """True when the user holds an active subscription that has not ended."""
    if actor_id is None:
        return False
    now = utcnow()
    subscription = Subscription.query.filter(
        Subscription.user_id == actor_id,
        Subscription.status == 'active',
        db.or_(Subscription.end_date.is_(None), Subscription.end_date > now),
    ).first()
    return subscription is not None
