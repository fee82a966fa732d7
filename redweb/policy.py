"""
Access rules per resource type.

Each predicate takes the caller (a user record) and the resource and
answers yes or no. Routes never filter on a failed check; they raise
ForbiddenError through ``require``.
"""
from redweb.errors import ForbiddenError
from redweb.models.blood_request import owner_id
from redweb.models.user import ROLE_ADMIN, ROLE_ORGANIZER


def is_admin(caller):
    return caller.get("role") == ROLE_ADMIN


def _same(a, b):
    return a is not None and b is not None and str(a) == str(b)


def can_modify_request(caller, blood_request):
    return _same(caller.get("id"), owner_id(blood_request)) or is_admin(caller)


def can_view_responders(caller, blood_request):
    # Owner only, admins included in the denial
    return _same(caller.get("id"), owner_id(blood_request))


def can_modify_drive(caller, drive):
    return _same(caller.get("id"), drive.get("organizerId")) or is_admin(caller)


def can_view_registrations(caller, drive):
    return (
        _same(caller.get("id"), drive.get("organizerId"))
        or is_admin(caller)
        or caller.get("role") == ROLE_ORGANIZER
    )


def can_access_notification(caller, notification):
    return _same(caller.get("id"), notification.get("userId"))


def require(allowed, message="Access denied"):
    if not allowed:
        raise ForbiddenError(message)
