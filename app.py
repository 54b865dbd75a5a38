from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException
from config import Config
from routes import health_bp, auth_bp, hotels_bp, bookings_bp, flights_bp, cities_bp, notifications_bp

from models import db
from flask_migrate import Migrate
from services.errors import BookingError, InternalError
from security.csrf import csrf_protect
from services.flight_broker import FlightBrokerClient
from utils.auth_context import load_current_user


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(hotels_bp)
    app.register_blueprint(bookings_bp)
    app.register_blueprint(flights_bp)
    app.register_blueprint(cities_bp)
    app.register_blueprint(notifications_bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    # Tests swap this for a fake before the first request
    app.extensions["flight_broker"] = FlightBrokerClient.from_config(app.config)

    @app.before_request
    def _load_user():
        load_current_user()

    @app.before_request
    def _csrf_guard():
        csrf_protect()

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp

    @app.errorhandler(BookingError)
    def _booking_error(err):
        if isinstance(err, InternalError):
            # details stay in the server log
            app.logger.error("booking failure: %s (%s)", err.message, err.details)
            return jsonify(error=err.message), err.status_code
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(Exception)
    def _unexpected(err):
        if isinstance(err, HTTPException):
            return jsonify(error=err.description), err.code
        db.session.rollback()
        app.logger.exception("unhandled error")
        return jsonify(error="Internal server error"), 500

    register_cli(app)

    return app

#-------------------------
import click


def register_cli(app):
    @app.cli.command("create-db")
    def create_db():
        """Create all tables directly, without running migrations."""
        db.create_all()
        click.echo("Database tables created")

#-------------------------


if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)
