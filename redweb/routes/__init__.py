"""Routes package - Blueprint registration."""
from redweb.routes.main import main_bp
from redweb.routes.auth import auth_bp
from redweb.routes.admin import admin_bp
from redweb.routes.blood_requests import blood_requests_bp
from redweb.routes.donation_drives import donation_drives_bp
from redweb.routes.notification import notification_bp
from redweb.routes.donations import donations_bp
from redweb.routes.messages import messages_bp


def register_blueprints(app):
    """Register all blueprints with the Flask app."""
    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(admin_bp, url_prefix="/api")
    app.register_blueprint(blood_requests_bp, url_prefix="/api/blood-requests")
    app.register_blueprint(donation_drives_bp, url_prefix="/api/donation-drives")
    app.register_blueprint(notification_bp, url_prefix="/api/notifications")
    app.register_blueprint(donations_bp, url_prefix="/api/donations")
    app.register_blueprint(messages_bp, url_prefix="/api/messages")
