import logging

from redweb.errors import NotFoundError, ValidationError
from redweb.extensions import get_store
from redweb.models import find_index
from redweb.models.user import ROLES, ROLE_ADMIN, build_user, to_public_dict
from redweb.services import save_or_fail
from redweb.store import USERS
from redweb.utils.auth_utils import hash_password
from redweb.utils.time import now_iso

logger = logging.getLogger(__name__)


def seed_default_admin(email, password, store=None):
    """Create the default admin account when there are no users at all."""
    store = store or get_store()
    with store.locked(USERS):
        users = store.load(USERS)
        if users:
            logger.info("👥 Found %d registered users", len(users))
            return None

        admin = build_user(
            {
                "email": email,
                "firstName": "Admin",
                "lastName": "User",
                "bloodGroup": "O+",
            },
            hash_password(password),
            role=ROLE_ADMIN,
        )
        save_or_fail(store, USERS, [admin], "Failed to seed admin user")

    logger.info("✅ Created default admin user: %s", email)
    return to_public_dict(admin)


def create_account(data, role, store=None):
    """Create a user with an explicit role, used by the admin scripts."""
    store = store or get_store()
    if role not in ROLES:
        raise ValidationError(f"Invalid role '{role}'")
    with store.locked(USERS):
        users = store.load(USERS)
        if any(u.get("email") == data.get("email") for u in users):
            return None
        user = build_user(data, hash_password(data["password"]), role=role)
        users.append(user)
        save_or_fail(store, USERS, users, "Failed to save user")
    return to_public_dict(user)


def list_users():
    users = get_store().load(USERS)
    public = [to_public_dict(u) for u in users]
    return {"total": len(public), "users": public}


def update_user(user_id, data):
    """Admin update: role and active flag only."""
    if not data:
        raise ValidationError("No data provided")

    store = get_store()
    with store.locked(USERS):
        users = store.load(USERS)
        index = find_index(users, user_id)
        if index == -1:
            raise NotFoundError("User not found")

        user = users[index]
        if "role" in data:
            if data["role"] not in ROLES:
                raise ValidationError(f"Invalid role '{data['role']}'. Use one of: {', '.join(ROLES)}")
            user["role"] = data["role"]
        if "isActive" in data:
            if not isinstance(data["isActive"], bool):
                raise ValidationError("isActive must be true or false")
            user["isActive"] = data["isActive"]
        user["updatedAt"] = now_iso()

        save_or_fail(store, USERS, users, "Failed to update user")

    logger.info("User %s updated: role=%s active=%s", user_id, user.get("role"), user.get("isActive"))
    return to_public_dict(user)
