from flask import Blueprint, current_app, jsonify

main_bp = Blueprint("main", __name__)


@main_bp.route("/")
def home():
    return jsonify({"status": "Backend running 🔥"})


@main_bp.route("/api/health")
def health():
    return jsonify({"status": "OK", "message": "Blood donation API is running"})


@main_bp.route("/api")
def api_index():
    return jsonify({
        "status": "OK",
        "message": "Blood donation API",
        "version": current_app.config.get("API_VERSION", "1.0.0"),
        "endpoints": {
            "auth": ["/api/auth/signin", "/api/auth/signup", "/api/auth/profile", "/api/auth/password"],
            "users": ["/api/users"],
            "bloodRequests": ["/api/blood-requests", "/api/blood-requests/my", "/api/blood-requests/statistics"],
            "donationDrives": ["/api/donation-drives", "/api/donation-drives/my"],
            "notifications": ["/api/notifications", "/api/notifications/mark-all-read"],
            "messages": ["/api/messages/conversations", "/api/messages/send", "/api/messages/search-users"],
            "donationHistory": ["/api/donations/history", "/api/donations/statistics"],
        },
    })


@main_bp.route("/routes")
def list_routes():
    return "\n".join(
        sorted(rule.rule for rule in current_app.url_map.iter_rules())
    )
