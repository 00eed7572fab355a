"""
Capability checks shared by every mutating operation.

Callers look the target record up first and only then apply one of these
checks, so a missing record is always reported as NotFound regardless of who
asks.
"""

from communityfund.models.user import ROLE_ADMIN
from communityfund.errors import Forbidden


def is_admin(role):
    return role == ROLE_ADMIN


def is_owner(resource_owner_id, caller_id):
    return caller_id is not None and str(resource_owner_id) == str(caller_id)


def is_self(target_id, caller_id):
    return caller_id is not None and str(target_id) == str(caller_id)


def require_admin(role, message='Admin access required'):
    if not is_admin(role):
        raise Forbidden(message)


def require_owner(resource_owner_id, caller_id, message='Only the owner can perform this action'):
    if not is_owner(resource_owner_id, caller_id):
        raise Forbidden(message)


def require_self(target_id, caller_id, message='You can only modify your own account'):
    if not is_self(target_id, caller_id):
        raise Forbidden(message)
