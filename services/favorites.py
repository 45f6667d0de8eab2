"""
Favorites Service

Per-user favorite recipes behind one repository interface. Keys have
the form '<source_key>:<recipe id>', e.g. 'external:mealdb:52772'.

ServerFavorites is the source of truth. CachedFavorites mirrors it into
any persistent key-value mapping and only serves the cached copy when
the server cannot be read.
"""

import json
import logging
from abc import ABC, abstractmethod

from sqlalchemy.exc import SQLAlchemyError

from models import db, Favorite
from providers.base import SourceKey
from .errors import ValidationError, PersistenceFailure
from .persistence import transaction

logger = logging.getLogger(__name__)


def favorite_key(source, recipe_id):
    """Build a favorite key, validating the source."""
    source_key = SourceKey.from_param(source)
    if source_key is None:
        raise ValidationError(f'Unknown recipe source: {source}')
    recipe_id = str(recipe_id or '').strip()
    if not recipe_id:
        raise ValidationError('Recipe ID is required')
    return f"{source_key.value}:{recipe_id}"


class FavoritesRepository(ABC):
    @abstractmethod
    def get(self, user_id):
        """Favorite keys of a user, most recent first."""

    @abstractmethod
    def add(self, user_id, key):
        """Add a favorite. Returns False when it was already present."""

    @abstractmethod
    def remove(self, user_id, key):
        """Remove a favorite. Returns False when it was not present."""

    def toggle(self, user_id, key):
        """Flip a favorite. Returns True when the key is now a favorite."""
        if key in self.get(user_id):
            self.remove(user_id, key)
            return False
        self.add(user_id, key)
        return True


class ServerFavorites(FavoritesRepository):
    def get(self, user_id):
        try:
            rows = Favorite.query.filter_by(user_id=user_id).order_by(
                Favorite.created_at.desc(), Favorite.id.desc()).all()
        except SQLAlchemyError as e:
            raise PersistenceFailure('Could not read favorites', details=str(e)) from e
        return [row.recipe_key for row in rows]

    def add(self, user_id, key):
        if Favorite.query.filter_by(user_id=user_id, recipe_key=key).first() is not None:
            return False
        with transaction():
            db.session.add(Favorite(user_id=user_id, recipe_key=key))
        return True

    def remove(self, user_id, key):
        favorite = Favorite.query.filter_by(user_id=user_id, recipe_key=key).first()
        if favorite is None:
            return False
        with transaction():
            db.session.delete(favorite)
        return True


class CachedFavorites(FavoritesRepository):
    """Server favorites mirrored into a key-value store (e.g. a shelve or a dict)."""

    def __init__(self, server, store):
        self.server = server
        self.store = store

    def _cache_key(self, user_id):
        return f"favorites:{user_id}"

    def _read_cache(self, user_id):
        raw = self.store.get(self._cache_key(user_id))
        if not raw:
            return []
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Discarding unreadable favorites cache for user %s", user_id)
            return []

    def _write_cache(self, user_id, keys):
        self.store[self._cache_key(user_id)] = json.dumps(keys)

    def get(self, user_id):
        try:
            keys = self.server.get(user_id)
        except PersistenceFailure as e:
            logger.warning("Serving cached favorites for user %s: %s", user_id, e.message)
            return self._read_cache(user_id)
        self._write_cache(user_id, keys)
        return keys

    def add(self, user_id, key):
        added = self.server.add(user_id, key)
        self._write_cache(user_id, self.server.get(user_id))
        return added

    def remove(self, user_id, key):
        removed = self.server.remove(user_id, key)
        self._write_cache(user_id, self.server.get(user_id))
        return removed
