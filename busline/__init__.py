import os

from dotenv import load_dotenv
from flask import Flask, flash, redirect, render_template, url_for

from .api import BackendClient
from .errors import DataNotFound, IncompleteBookingData, NetworkFailure
from .logger_config import get_logger, setup_logging
from .middleware import register_request_logging

logger = get_logger(__name__)


def create_app(config: dict | None = None):
    load_dotenv()

    app = Flask(
        __name__,
        template_folder="../templates",
    )

    app.config["SECRET_KEY"] = os.getenv("SECRET_KEY", "dev-secret")
    app.config["BACKEND_BASE_URL"] = os.getenv("BACKEND_BASE_URL", "http://localhost:3001/api")
    app.config["BACKEND_TIMEOUT"] = float(os.getenv("BACKEND_TIMEOUT", "10"))
    app.config["APP_ENV"] = os.getenv("APP_ENV", "development")
    app.config["LOG_LEVEL"] = os.getenv("LOG_LEVEL", "INFO")
    if config:
        app.config.update(config)

    setup_logging(app.config["APP_ENV"], app.config["LOG_LEVEL"])
    register_request_logging(app)

    app.extensions["backend_client"] = BackendClient(
        app.config["BACKEND_BASE_URL"],
        timeout=app.config["BACKEND_TIMEOUT"],
    )

    # missing or partial booking state always sends the user back to step 1
    @app.errorhandler(IncompleteBookingData)
    def booking_state_missing(exc):
        logger.warning("booking_state_missing", reason=exc.message)
        flash(exc.message, "warning")
        return redirect(url_for("search.search"))

    @app.errorhandler(DataNotFound)
    def data_not_found(exc):
        return render_template("not_found.html", message=exc.message), 404

    @app.errorhandler(NetworkFailure)
    def backend_unavailable(exc):
        return render_template("error.html", message=exc.message), 502

    # register blueprints
    from .search import search_bp
    app.register_blueprint(search_bp)

    from .seat_routes import bp as seats_bp
    app.register_blueprint(seats_bp)

    from .booking import booking_bp
    app.register_blueprint(booking_bp)

    from .payments import payments_bp
    app.register_blueprint(payments_bp)

    from .stepper import stepper_bp
    app.register_blueprint(stepper_bp)

    logger.info("application_starting", backend=app.config["BACKEND_BASE_URL"], environment=app.config["APP_ENV"])
    return app
