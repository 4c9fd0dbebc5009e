import logging

import click
from flask import Flask, jsonify
from flask_migrate import Migrate

from config import Config
from models import db
from routes import health_bp, auth_bp, catalog_bp, booking_bp
from utils.auth_context import load_current_user
from utils.cache import TTLCache
from utils.seed import seed_catalog


def _configure_logging(app):
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    app.logger.setLevel(level)


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)
    _configure_logging(app)

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(catalog_bp)
    app.register_blueprint(booking_bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    # Catalog lookups read through this; booking checks never do
    app.extensions["catalog_cache"] = TTLCache(
        default_ttl=app.config.get("CATALOG_CACHE_TTL_SECONDS", 300),
        maxsize=app.config.get("CATALOG_CACHE_MAXSIZE", 1024),
    )

    @app.before_request
    def _load_user():
        load_current_user()

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp

    @app.errorhandler(404)
    def _not_found(_err):
        return jsonify(success=False, error={"message": "Route not found", "statusCode": 404}), 404

    @app.errorhandler(405)
    def _method_not_allowed(_err):
        return jsonify(success=False, error={"message": "Method not allowed", "statusCode": 405}), 405

    @app.errorhandler(500)
    def _internal_error(err):
        app.logger.error("Unhandled error: %s", err)
        return jsonify(success=False, error={"message": "Internal server error", "statusCode": 500}), 500

    register_cli(app)

    return app

#-------------------------

def register_cli(app):
    @app.cli.command("seed-catalog")
    def seed_catalog_command():
        """Insert the demo branches, capsters and services (idempotent)."""
        created = seed_catalog()
        app.extensions["catalog_cache"].clear()
        click.echo(
            f"Seeded {created['branches']} branches, "
            f"{created['capsters']} capsters, {created['services']} services"
        )

    @app.cli.command("create-db")
    def create_db_command():
        """Create all tables directly (local development without migrations)."""
        db.create_all()
        click.echo("Tables created")

#-------------------------


if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)
