from flask import Blueprint, jsonify

from redweb.services import notifications as service
from redweb.utils.auth_utils import token_required
from redweb.utils.request_utils import json_body

notification_bp = Blueprint("notification", __name__)


@notification_bp.route("", methods=["GET", "OPTIONS"])
@token_required
def list_notifications(current_user):
    return jsonify(service.list_notifications(current_user))


@notification_bp.route("", methods=["POST"])
@token_required
def create_notification(current_user):
    data = json_body()
    return jsonify(service.create_notification(current_user, data)), 201


@notification_bp.route("/unread-count", methods=["GET", "OPTIONS"])
@token_required
def unread_count(current_user):
    return jsonify({"count": service.unread_count(current_user)})


@notification_bp.route("/mark-all-read", methods=["PUT", "OPTIONS"])
@token_required
def mark_all_read(current_user):
    updated = service.mark_all_read(current_user)
    return jsonify({
        "message": "All notifications marked as read",
        "updated": updated,
    })


@notification_bp.route("/<notification_id>", methods=["GET", "OPTIONS"])
@token_required
def get_notification(current_user, notification_id):
    return jsonify(service.get_notification(current_user, notification_id))


@notification_bp.route("/<notification_id>/read", methods=["PUT", "OPTIONS"])
@token_required
def mark_read(current_user, notification_id):
    return jsonify(service.mark_notification_read(current_user, notification_id))


@notification_bp.route("/<notification_id>", methods=["DELETE"])
@token_required
def delete_notification(current_user, notification_id):
    service.delete_notification(current_user, notification_id)
    return jsonify({"message": "Notification deleted successfully"})
