import logging

from redweb.errors import ConflictError, InvalidCredentialsError, NotFoundError, ValidationError
from redweb.extensions import get_store
from redweb.models import find_index, find_by_id
from redweb.models.user import (
    PROFILE_FIELDS,
    SIGNUP_REQUIRED,
    build_user,
    stored_hash,
    to_public_dict,
)
from redweb.services import save_or_fail
from redweb.store import USERS
from redweb.utils.auth_utils import burn_password_check, hash_password, issue_token, verify_password
from redweb.utils.time import now_iso

logger = logging.getLogger(__name__)


def _token_for(user):
    return issue_token({
        "userId": user["id"],
        "email": user.get("email"),
        "role": user.get("role"),
    })


def sign_up(data):
    if not data or any(not data.get(field) for field in SIGNUP_REQUIRED):
        raise ValidationError("Required fields missing")

    store = get_store()
    with store.locked(USERS):
        users = store.load(USERS)
        # inactive accounts still own their email
        if any(u.get("email") == data["email"] for u in users):
            raise ConflictError("User already exists")

        user = build_user(data, hash_password(data["password"]))
        users.append(user)
        save_or_fail(store, USERS, users, "Failed to save user")

    logger.info("Successful registration: %s", user["email"])
    return _token_for(user), to_public_dict(user)


def sign_in(email, password):
    if not email or not password:
        raise ValidationError("Email and password required")

    users = get_store().load(USERS)
    user = next(
        (u for u in users if u.get("email") == email and u.get("isActive")),
        None,
    )

    if user is None:
        burn_password_check(password)
        logger.info("Sign in failed for %s", email)
        raise InvalidCredentialsError()

    if not verify_password(password, stored_hash(user)):
        logger.info("Sign in failed for %s", email)
        raise InvalidCredentialsError()

    logger.info("Successful login: %s", email)
    return _token_for(user), to_public_dict(user)


def get_profile(user_id):
    user = find_by_id(get_store().load(USERS), user_id)
    if not user:
        raise NotFoundError("User not found")
    return to_public_dict(user)


def update_profile(user_id, data):
    if not data:
        raise ValidationError("No data provided")

    store = get_store()
    with store.locked(USERS):
        users = store.load(USERS)
        index = find_index(users, user_id)
        if index == -1:
            raise NotFoundError("User not found")

        user = users[index]
        for field in PROFILE_FIELDS:
            if field in data:
                user[field] = data[field]
        user["updatedAt"] = now_iso()

        save_or_fail(store, USERS, users, "Failed to update profile")

    return to_public_dict(user)


def change_password(user_id, current_password, new_password):
    if not current_password or not new_password:
        raise ValidationError("Current and new password are required")

    store = get_store()
    with store.locked(USERS):
        users = store.load(USERS)
        index = find_index(users, user_id)
        if index == -1:
            raise NotFoundError("User not found")

        user = users[index]
        if not verify_password(current_password, stored_hash(user)):
            raise InvalidCredentialsError("Current password is incorrect")

        user.pop("password", None)
        user["passwordHash"] = hash_password(new_password)
        user["updatedAt"] = now_iso()
        save_or_fail(store, USERS, users, "Failed to update password")

    logger.info("Password changed for user %s", user_id)
    return True
