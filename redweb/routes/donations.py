from flask import Blueprint, jsonify

from redweb.services import donations as service
from redweb.utils.auth_utils import token_required
from redweb.utils.request_utils import json_body

donations_bp = Blueprint("donations", __name__)


# ================= HISTORY =================
@donations_bp.route("/history", methods=["GET", "OPTIONS"])
@token_required
def history(current_user):
    return jsonify(service.list_history(current_user))


@donations_bp.route("/history", methods=["POST"])
@token_required
def add_donation(current_user):
    data = json_body()
    return jsonify(service.add_donation(current_user, data)), 201


# ================= STATISTICS =================
@donations_bp.route("/statistics", methods=["GET", "OPTIONS"])
@token_required
def statistics(current_user):
    return jsonify(service.statistics(current_user))
