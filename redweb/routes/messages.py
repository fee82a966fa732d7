from flask import Blueprint, jsonify, request

from redweb.services import messages as service
from redweb.utils.auth_utils import token_required
from redweb.utils.request_utils import json_body

messages_bp = Blueprint("messages", __name__)


@messages_bp.route("/conversations", methods=["GET", "OPTIONS"])
@token_required
def conversations(current_user):
    return jsonify(service.list_conversations(current_user))


@messages_bp.route("/conversation/<other_user_id>", methods=["GET", "OPTIONS"])
@token_required
def conversation(current_user, other_user_id):
    return jsonify(service.get_conversation(current_user, other_user_id))


@messages_bp.route("/send", methods=["POST", "OPTIONS"])
@token_required
def send(current_user):
    data = json_body()
    return jsonify(service.send_message(current_user, data)), 201


@messages_bp.route("/mark-read/<other_user_id>", methods=["PUT", "OPTIONS"])
@token_required
def mark_read(current_user, other_user_id):
    updated = service.mark_read(current_user, other_user_id)
    return jsonify({"success": True, "updated": updated})


@messages_bp.route("/search-users", methods=["GET", "OPTIONS"])
@token_required
def search_users(current_user):
    return jsonify(service.search_users(current_user, request.args.get("query", "")))
