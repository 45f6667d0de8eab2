"""
Audit Service

Adds audit-log rows inside the caller's transaction. Nothing here commits.
"""

import json

from flask import has_request_context, request

from models import db, AuditLog

ACTION_IMPORT_RECIPE = 'IMPORT_RECIPE'
ACTION_CREATE_RECIPE = 'CREATE_RECIPE'
ACTION_UPDATE_RECIPE_STATUS = 'UPDATE_RECIPE_STATUS'


def _encode(values):
    if values is None:
        return None
    return json.dumps(values, default=str, sort_keys=True)


def record_action(actor_id, action, entity_type, entity_id, new_values=None, old_values=None, notes=None):
    """Stage one audit row on the current session and return it."""
    ip_address = None
    user_agent = None
    if has_request_context():
        ip_address = request.headers.get('X-Forwarded-For', request.remote_addr)
        user_agent = (request.user_agent.string or '')[:255] or None

    entry = AuditLog(
        user_id=actor_id,
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id) if entity_id is not None else None,
        old_values=_encode(old_values),
        new_values=_encode(new_values),
        notes=notes,
        ip_address=ip_address,
        user_agent=user_agent,
    )
    db.session.add(entry)
    return entry
