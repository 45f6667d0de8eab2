"""
Favorite Model

Server-confirmed favorites. recipe_key is '<source_key>:<recipe id>' so
external recipes can be favorited without being imported.
"""

from .base import db, utcnow


class Favorite(db.Model):
    __table_args__ = (
        db.UniqueConstraint('user_id', 'recipe_key', name='uq_favorite_user_recipe'),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='CASCADE'), nullable=False, index=True)
    recipe_key = db.Column(db.String(150), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
