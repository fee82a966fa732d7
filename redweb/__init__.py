"""
RedWeb blood donation API - Application Factory
"""
import logging
import os

import click
from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from config.settings import config
from redweb.errors import ApiError
from redweb.extensions import store_ext

logger = logging.getLogger(__name__)


def create_app(config_name=None, **overrides):
    """Application Factory."""
    if config_name is None:
        config_name = os.environ.get("FLASK_ENV", "development")

    app = Flask(__name__)
    app.config.from_object(config.get(config_name, config["default"]))
    app.config.update(overrides)

    configure_logging(app)

    # ================= CORS =================
    CORS(
        app,
        resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}},
        supports_credentials=True,
        allow_headers=["Content-Type", "Authorization"],
        methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    )

    # ================= STORAGE =================
    store = store_ext.init_app(app)
    logger.info("📁 Data directory: %s", app.config["DATA_DIR"])

    if app.config.get("SEED_ADMIN"):
        from redweb.services.users import seed_default_admin

        with app.app_context():
            seed_default_admin(
                app.config["DEFAULT_ADMIN_EMAIL"],
                app.config["DEFAULT_ADMIN_PASSWORD"],
                store=store,
            )

    # ================= BLUEPRINTS =================
    from redweb.routes import register_blueprints

    register_blueprints(app)
    register_error_handlers(app)
    register_cli_commands(app)

    @app.before_request
    def log_request():
        logger.debug("%s %s", request.method, request.path)

    logger.info("✅ RedWeb API ready (%s)", config_name)
    return app


def configure_logging(app):
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logging.getLogger("redweb").setLevel(level)


def register_error_handlers(app):

    @app.errorhandler(ApiError)
    def handle_api_error(e):
        if e.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.path, e.message)
        return jsonify(e.to_dict(include_detail=app.debug)), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        if e.code == 404:
            return jsonify({
                "message": "Route not found",
                "method": request.method,
                "url": request.path,
            }), 404
        return jsonify({"message": e.description or e.name}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        body = {"message": "Server error"}
        if app.debug:
            body["error"] = str(e)
        return jsonify(body), 500


def register_cli_commands(app):
    """Register CLI commands."""

    @app.cli.command("init-data")
    def init_data_command():
        """Creates the data directory and empty collection files."""
        app.extensions["record_store"].initialize()
        click.echo(f"Initialized data files in {app.config['DATA_DIR']}")

    @app.cli.command("reconcile-donations")
    @click.option("--dry-run", is_flag=True, help="Report drift without fixing it.")
    def reconcile_donations_command(dry_run):
        """Rebuilds user donation counters from the donation history."""
        from redweb.services.donations import reconcile_counters

        drift = reconcile_counters(store=app.extensions["record_store"], fix=not dry_run)
        for row in drift:
            click.echo(
                f"{row['email']}: total {row['storedTotal']} -> {row['expectedTotal']}, "
                f"last {row['storedLastDonationDate']} -> {row['expectedLastDonationDate']}"
            )
        click.echo(f"{len(drift)} user(s) {'out of step' if dry_run else 'fixed'}")
