"""
Flask app factory: registers config, logging, capture manager, blueprints,
and error handlers.
"""

from __future__ import annotations

import os
from typing import Callable, List, Optional, Type

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from payload_router import SnifferSettings, load_settings
from payload_router.ports import CaptureSourcePort, PublisherPort

from snifferapp.config import Config, DevelopmentConfig, ProductionConfig
from snifferapp.utils import init_logging
from snifferapp.managers.pipeline_bridge import build_pipeline
from snifferapp.managers.sniffer_manager import SnifferManager
from snifferapp.sinks.console import ConsolePresenter
from snifferapp.sinks.recent import RecentDetections
from snifferapp.routes import capture as capture_bp
from snifferapp.routes import detections as detections_bp


def create_app(
    config_class: Type[Config] | None = None,
    *,
    settings: Optional[SnifferSettings] = None,
    source_factory: Optional[Callable[[], CaptureSourcePort]] = None,
    publishers: Optional[List[PublisherPort]] = None,
) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)

    # Config selection
    cfg: Type[Config]
    env = os.getenv("FLASK_ENV", "production").lower()
    if config_class is not None:
        cfg = config_class
    elif env.startswith("dev"):
        cfg = DevelopmentConfig
    else:
        cfg = ProductionConfig
    app.config.from_object(cfg)

    # Sessions
    app.secret_key = app.config["SECRET_KEY"]

    # Logging
    logger = init_logging(app.config["LOG_LEVEL"], app.config["LOG_FILE"])
    app.logger = logger  # align Flask's logger with ours

    if app.config["SECRET_KEY"] == "dev-unsafe-change-this" and not app.config.get("TESTING"):
        logger.warning("Using default SECRET_KEY. Set FLASK_SECRET_KEY for production.")

    # Sniffer settings are read once; no hot reload
    if settings is None:
        settings = load_settings(app.config["SNIFFER_CONFIG"])

    recent = RecentDetections(capacity=settings.recent_capacity)
    presenters = [recent]
    if app.config.get("PRINT_RECORDS"):
        presenters.append(ConsolePresenter())

    bundle = build_pipeline(settings, presenters=presenters, publishers=publishers)

    app.extensions["sniffer_settings"] = settings
    app.extensions["recent_detections"] = recent
    app.extensions["sniffer_mgr"] = SnifferManager(
        logger=logger,
        settings=settings,
        bundle=bundle,
        source_factory=source_factory,
    )

    # Error handlers
    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        return jsonify({"success": False, "error": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected_exception(e: Exception):
        app.logger.exception("Unhandled error")
        return jsonify({"success": False, "error": "Internal server error"}), 500

    # Blueprints
    app.register_blueprint(capture_bp.bp)
    app.register_blueprint(detections_bp.bp)

    # Health
    @app.route("/healthz")
    def healthz():
        return jsonify({"status": "ok"}), 200

    return app
