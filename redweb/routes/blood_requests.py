from flask import Blueprint, jsonify

from redweb.services import blood_requests as service
from redweb.utils.auth_utils import token_required
from redweb.utils.request_utils import json_body

blood_requests_bp = Blueprint("blood_requests", __name__)


# ================= COLLECTION =================
@blood_requests_bp.route("", methods=["GET", "OPTIONS"])
@token_required
def list_requests(current_user):
    return jsonify(service.list_requests())


@blood_requests_bp.route("/my", methods=["GET", "OPTIONS"])
@token_required
def my_requests(current_user):
    return jsonify(service.list_my_requests(current_user))


@blood_requests_bp.route("", methods=["POST"])
@token_required
def create_request(current_user):
    data = json_body()
    return jsonify(service.create_request(current_user, data)), 201


# Registered before "/<request_id>" so it is not read as an id
@blood_requests_bp.route("/statistics", methods=["GET", "OPTIONS"])
@token_required
def statistics(current_user):
    return jsonify(service.statistics())


# ================= SINGLE REQUEST =================
@blood_requests_bp.route("/<request_id>", methods=["GET", "OPTIONS"])
@token_required
def get_request(current_user, request_id):
    return jsonify(service.get_request(request_id))


@blood_requests_bp.route("/<request_id>", methods=["PUT"])
@token_required
def update_request(current_user, request_id):
    data = json_body()
    return jsonify(service.update_request(current_user, request_id, data))


@blood_requests_bp.route("/<request_id>/status", methods=["PATCH", "OPTIONS"])
@token_required
def change_status(current_user, request_id):
    data = json_body() or {}
    return jsonify(service.change_status(current_user, request_id, data.get("status")))


@blood_requests_bp.route("/<request_id>", methods=["DELETE"])
@token_required
def delete_request(current_user, request_id):
    service.delete_request(current_user, request_id)
    return jsonify({"message": "Blood request deleted successfully"})


# ================= RESPONSES =================
@blood_requests_bp.route("/<request_id>/respond", methods=["POST", "OPTIONS"])
@token_required
def respond(current_user, request_id):
    blood_request = service.respond(current_user, request_id)
    return jsonify({
        "message": "Response recorded",
        "request": blood_request,
    })


@blood_requests_bp.route("/<request_id>/respond", methods=["DELETE"])
@token_required
def withdraw_response(current_user, request_id):
    blood_request = service.withdraw_response(current_user, request_id)
    return jsonify({
        "message": "Response withdrawn",
        "request": blood_request,
    })


@blood_requests_bp.route("/<request_id>/responders", methods=["GET", "OPTIONS"])
@token_required
def responders(current_user, request_id):
    return jsonify(service.get_responders(current_user, request_id))
