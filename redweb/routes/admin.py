"""
ADMIN ROUTES - user management
"""
from flask import Blueprint, jsonify

from redweb.services import donations as donation_service
from redweb.services import users as user_service
from redweb.utils.auth_utils import admin_required, token_required
from redweb.utils.request_utils import json_body

admin_bp = Blueprint("admin", __name__)


# ================= USERS =================
@admin_bp.route("/users", methods=["GET", "OPTIONS"])
@token_required
@admin_required
def list_users(current_user):
    return jsonify(user_service.list_users())


@admin_bp.route("/users/<user_id>", methods=["PATCH"])
@token_required
@admin_required
def update_user(current_user, user_id):
    data = json_body()
    return jsonify(user_service.update_user(user_id, data))


# ================= MAINTENANCE =================
@admin_bp.route("/admin/reconcile-donations", methods=["POST"])
@token_required
@admin_required
def reconcile_donations(current_user):
    drift = donation_service.reconcile_counters()
    return jsonify({
        "message": "Donation counters reconciled",
        "fixed": len(drift),
        "users": drift,
    })
