from flask import Blueprint, request, jsonify

from redweb.services import auth as auth_service
from redweb.utils.auth_utils import token_required
from redweb.utils.request_utils import json_body

auth_bp = Blueprint("auth", __name__)


# ================= SIGNUP =================
@auth_bp.route("/signup", methods=["POST", "OPTIONS"])
def signup():
    if request.method == "OPTIONS":
        return jsonify({"status": "ok"}), 200

    data = json_body() or {}
    token, user = auth_service.sign_up(data)

    return jsonify({
        "token": token,
        "user": user,
    }), 201


# ================= SIGNIN =================
@auth_bp.route("/signin", methods=["POST", "OPTIONS"])
def signin():
    if request.method == "OPTIONS":
        return jsonify({"status": "ok"}), 200

    data = json_body() or {}
    email = data.get("email")
    if isinstance(email, str):
        email = email.strip()

    token, user = auth_service.sign_in(email, data.get("password"))

    return jsonify({
        "token": token,
        "user": user,
    }), 200


# ================= PROFILE =================
@auth_bp.route("/profile", methods=["GET", "OPTIONS"])
@token_required
def get_profile(current_user):
    return jsonify(auth_service.get_profile(current_user["id"]))


@auth_bp.route("/profile", methods=["PUT"])
@token_required
def update_profile(current_user):
    data = json_body()
    user = auth_service.update_profile(current_user["id"], data)

    return jsonify({
        "message": "Profile updated successfully",
        "user": user,
    })


# ================= PASSWORD =================
@auth_bp.route("/password", methods=["PUT", "OPTIONS"])
@token_required
def change_password(current_user):
    data = json_body() or {}
    auth_service.change_password(
        current_user["id"],
        data.get("currentPassword"),
        data.get("newPassword"),
    )
    return jsonify({"message": "Password updated successfully"})


# ================= LOGOUT =================
@auth_bp.route("/logout", methods=["POST"])
@token_required
def logout(current_user):
    # Tokens are stateless; the client drops its copy
    return jsonify({"message": "Logout successful"})
