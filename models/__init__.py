"""
Models Package

Exports all database models and the db instance for use throughout the application.
"""

from .base import db, utcnow

from .user import User, Subscription
from .recipe import Recipe, RecipeIngredient, RecipeInstruction, Tag, RecipeTag, RecipeNutrition
from .moderation import RecipeStatusHistory
from .audit import AuditLog
from .favorite import Favorite

__all__ = [
    'db',
    'utcnow',
    'User',
    'Subscription',
    'Recipe',
    'RecipeIngredient',
    'RecipeInstruction',
    'Tag',
    'RecipeTag',
    'RecipeNutrition',
    'RecipeStatusHistory',
    'AuditLog',
    'Favorite',
]
