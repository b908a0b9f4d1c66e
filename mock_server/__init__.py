import os

import click
from dotenv import load_dotenv
from flask import Flask
from flask_sqlalchemy import SQLAlchemy

from busline.logger_config import get_logger, setup_logging
from busline.middleware import register_request_logging

db = SQLAlchemy()
logger = get_logger(__name__)


def create_app(config: dict | None = None):
    load_dotenv()

    app = Flask(__name__)

    app.config["SECRET_KEY"] = os.getenv("SECRET_KEY", "dev-secret")
    app.config["SQLALCHEMY_DATABASE_URI"] = os.getenv("DATABASE_URL", "sqlite://")
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    app.config["SALE_DELAY_SECONDS"] = float(os.getenv("SALE_DELAY_SECONDS", "0.5"))
    app.config["SALE_DECLINE"] = os.getenv("SALE_DECLINE", "false").lower() == "true"
    app.config["SEED_DAYS"] = int(os.getenv("SEED_DAYS", "14"))
    app.config["SEED_ON_START"] = True
    app.config["APP_ENV"] = os.getenv("APP_ENV", "development")
    app.config["LOG_LEVEL"] = os.getenv("LOG_LEVEL", "INFO")
    if config:
        app.config.update(config)

    setup_logging(app.config["APP_ENV"], app.config["LOG_LEVEL"])
    register_request_logging(app)
    db.init_app(app)

    from .routes import api_bp, alias_bp
    app.register_blueprint(api_bp)
    app.register_blueprint(alias_bp)

    from .seed import seed_database

    @app.cli.command("seed")
    @click.option("--days", default=None, type=int, help="How many days of daily trips to generate.")
    def seed_command(days):
        """Create tables and load agencies, trips and seat maps."""
        db.create_all()
        added = seed_database(days if days is not None else app.config["SEED_DAYS"])
        click.echo(f"Seeded {added} trips.")

    # create tables, and seed an empty store
    with app.app_context():
        from . import models
        db.create_all()
        if app.config["SEED_ON_START"] and db.session.query(models.Agency.id).first() is None:
            seed_database(app.config["SEED_DAYS"])

    return app
