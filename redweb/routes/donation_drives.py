from flask import Blueprint, jsonify

from redweb.services import donation_drives as service
from redweb.utils.auth_utils import token_required
from redweb.utils.request_utils import json_body

donation_drives_bp = Blueprint("donation_drives", __name__)


# ================= COLLECTION =================
@donation_drives_bp.route("", methods=["GET", "OPTIONS"])
@token_required
def list_drives(current_user):
    return jsonify(service.list_drives())


@donation_drives_bp.route("/my", methods=["GET", "OPTIONS"])
@token_required
def my_drives(current_user):
    return jsonify(service.list_my_drives(current_user))


@donation_drives_bp.route("", methods=["POST"])
@token_required
def create_drive(current_user):
    data = json_body()
    return jsonify(service.create_drive(current_user, data)), 201


# ================= SINGLE DRIVE =================
@donation_drives_bp.route("/<drive_id>", methods=["GET", "OPTIONS"])
@token_required
def get_drive(current_user, drive_id):
    return jsonify(service.get_drive(drive_id))


@donation_drives_bp.route("/<drive_id>", methods=["PUT"])
@token_required
def update_drive(current_user, drive_id):
    data = json_body()
    return jsonify(service.update_drive(current_user, drive_id, data))


@donation_drives_bp.route("/<drive_id>", methods=["DELETE"])
@token_required
def delete_drive(current_user, drive_id):
    service.delete_drive(current_user, drive_id)
    return jsonify({"message": "Donation drive deleted successfully"})


# ================= REGISTRATION =================
@donation_drives_bp.route("/<drive_id>/register", methods=["POST", "OPTIONS"])
@token_required
def register(current_user, drive_id):
    drive = service.register(current_user, drive_id)
    return jsonify({
        "message": "Successfully registered for donation drive",
        "drive": drive,
    })


@donation_drives_bp.route("/<drive_id>/register", methods=["DELETE"])
@token_required
def unregister(current_user, drive_id):
    drive = service.unregister(current_user, drive_id)
    return jsonify({
        "message": "Successfully unregistered from donation drive",
        "drive": drive,
    })


@donation_drives_bp.route("/<drive_id>/registrations", methods=["GET", "OPTIONS"])
@token_required
def registrations(current_user, drive_id):
    return jsonify(service.get_registrations(current_user, drive_id))
