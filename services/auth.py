"""
Auth Collaborator

Resolves the acting user for a request. Sessions are handled upstream;
this service trusts the X-User-Id header set by that layer.
"""

from dataclasses import dataclass
from functools import wraps
from typing import Optional

from flask import current_app, request

from models import db, User
from .errors import PermissionDenied, Unauthorized

USER_HEADER = 'X-User-Id'


@dataclass
class Actor:
    id: int
    role: str = 'user'
    email: Optional[str] = None
    name: Optional[str] = None


def get_current_actor():
    """The Actor for the current request, or None when anonymous."""
    raw_id = (request.headers.get(USER_HEADER) or '').strip()
    if not raw_id.isdigit():
        return None
    user = db.session.get(User, int(raw_id))
    if user is None:
        return None
    return Actor(id=user.id, role=user.role or 'user', email=user.email, name=user.name)


def is_admin(actor):
    if actor is None:
        return False
    if (actor.role or '').lower() == 'admin':
        return True
    admin_email = current_app.config.get('ADMIN_EMAIL')
    return bool(admin_email and actor.email and actor.email.lower() == admin_email.lower())


def login_required(view):
    @wraps(view)
    def wrapped(*args, **kwargs):
        if get_current_actor() is None:
            raise Unauthorized('Authentication required')
        return view(*args, **kwargs)
    return wrapped


def admin_required(view):
    @wraps(view)
    def wrapped(*args, **kwargs):
        actor = get_current_actor()
        if actor is None:
            raise Unauthorized('Authentication required')
        if not is_admin(actor):
            raise PermissionDenied('Admin access required')
        return view(*args, **kwargs)
    return wrapped
