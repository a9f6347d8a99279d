"""Application factory for ngtax backend services."""

import logging
import os
from warnings import warn

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import BadRequest

from .http import problem_response
from .routes import register_routes
from .routes.config import get_configuration_metadata
from .services.calculation_service import CALCULATION_FAILED_MESSAGE, TaxCalculationError

_LOGGER = logging.getLogger(__name__)


def _parse_allowed_origins(raw: str | None) -> set[str]:
    """Convert an environment variable into a normalised set of origins."""

    if not raw:
        return set()

    return {origin.strip() for origin in raw.split(",") if origin.strip()}


def create_app() -> Flask:
    """Create and configure the Flask application instance."""

    app = Flask(__name__)
    app.json.ensure_ascii = False

    allowed_origins = _parse_allowed_origins(os.getenv("NGTAX_ALLOWED_ORIGINS"))

    if not allowed_origins:
        warn(
            "No allowed origins configured; cross-origin requests will be rejected.",
            stacklevel=1,
        )

    CORS(
        app,
        resources={r"/api/*": {"origins": sorted(allowed_origins)}},
        supports_credentials=False,
        methods=["GET", "OPTIONS", "POST"],
        allow_headers=["Content-Type"],
    )

    register_routes(app)

    @app.route("/health", methods=["GET"])
    def health_check():
        """Simple health check endpoint for infrastructure monitoring."""

        payload = {"status": "ok", **get_configuration_metadata()}
        return jsonify(payload)

    @app.errorhandler(BadRequest)
    def handle_bad_request(error: BadRequest):
        """Return consistent JSON responses for malformed payloads."""

        _LOGGER.info("Bad request: %s", error.description)
        return problem_response(
            CALCULATION_FAILED_MESSAGE, status=400, code="bad_request"
        ).to_response()

    @app.errorhandler(ValueError)
    def handle_value_error(error: ValueError):
        """Surface validation and calculation failures as a flat 400 payload."""

        if not isinstance(error, TaxCalculationError):
            _LOGGER.warning("Unhandled value error: %s", error)
        return problem_response(
            CALCULATION_FAILED_MESSAGE, status=400, code="validation_error"
        ).to_response()

    return app
