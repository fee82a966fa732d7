import logging
from datetime import timedelta
from functools import wraps

import jwt
from flask import current_app, jsonify, request
from werkzeug.security import check_password_hash, generate_password_hash

from redweb.errors import AuthError, ForbiddenError, InvalidTokenError, MissingTokenError
from redweb.extensions import get_store
from redweb.models import find_by_id
from redweb.models.user import ROLE_ADMIN
from redweb.store import USERS
from redweb.utils.time import utcnow

logger = logging.getLogger(__name__)

_dummy_hash = None


# ================= PASSWORDS =================
def hash_password(plaintext):
    return generate_password_hash(plaintext)


def verify_password(plaintext, password_hash):
    if not plaintext or not password_hash:
        return False
    try:
        return check_password_hash(password_hash, plaintext)
    except (ValueError, TypeError):
        logger.warning("Stored password hash has an unknown format")
        return False


def burn_password_check(plaintext):
    """Run a hash check that always fails, so a miss costs as much as a hit."""
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = generate_password_hash("not-a-real-password")
    verify_password(plaintext or "", _dummy_hash)
    return False


# ================= TOKENS =================
def _jwt_settings(secret=None, algorithm=None, expires=None):
    config = current_app.config
    return (
        secret or config["JWT_SECRET_KEY"],
        algorithm or config.get("JWT_ALGORITHM", "HS256"),
        expires or config.get("JWT_ACCESS_TOKEN_EXPIRES", timedelta(hours=24)),
    )


def issue_token(subject, now=None, secret=None, expires=None):
    """Sign ``{userId, email, role}`` into a token valid for 24 hours."""
    secret, algorithm, expires = _jwt_settings(secret, expires=expires)
    issued_at = now or utcnow()
    payload = {
        "id": subject["userId"],
        "userId": subject["userId"],
        "email": subject.get("email"),
        "role": subject.get("role"),
        "iat": issued_at,
        "exp": issued_at + expires,
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def validate_token(token, secret=None):
    """Return the claims of a valid token or raise InvalidTokenError."""
    secret, algorithm, _ = _jwt_settings(secret)
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            options={"require": ["exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise InvalidTokenError("Token expired")
    except jwt.InvalidTokenError:
        raise InvalidTokenError("Invalid token")

    user_id = payload.get("userId") or payload.get("id")
    if not user_id:
        raise InvalidTokenError("Invalid token")

    return {
        "userId": user_id,
        "email": payload.get("email"),
        "role": payload.get("role"),
    }


def extract_bearer(header):
    if not header:
        raise MissingTokenError()
    parts = header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1]:
        raise MissingTokenError()
    return parts[1]


# ================= DECORATORS =================
def token_required(f):
    """
    Authentication decorator. Passes the stored user record as the first
    argument. CORS preflight (OPTIONS) goes through without a token.
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        if request.method == "OPTIONS":
            return jsonify({"status": "ok"}), 200

        token = extract_bearer(request.headers.get("Authorization"))
        claims = validate_token(token)

        current_user = find_by_id(get_store().load(USERS), claims["userId"])
        if not current_user:
            raise AuthError("User not found")
        if current_user.get("isActive") is False:
            raise AuthError("Account is deactivated")

        return f(current_user, *args, **kwargs)

    return decorated


def admin_required(f):
    @wraps(f)
    def decorated_function(current_user, *args, **kwargs):
        if current_user.get("role") != ROLE_ADMIN:
            raise ForbiddenError("Admin access required")
        return f(current_user, *args, **kwargs)
    return decorated_function
