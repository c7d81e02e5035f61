from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from .config import load_settings
from .errors import SantaError
from .extensions import santa
from .services.registry import Registry
from .views.public import public_bp
from .views.santa import santa_bp


def create_app(test_config: Mapping[str, Any] | None = None, registry: Registry | None = None) -> Flask:
    """
    Builds the app. Raises StartupError if the config or the participants store
    cannot be read; the caller must not serve traffic in that case.
    """
    app = Flask(__name__)

    load_settings(app, test_config)
    santa.init_app(app, registry)

    # Blueprints
    app.register_blueprint(public_bp)
    app.register_blueprint(santa_bp)

    # Failures are already logged where they happen; this only shapes the response.
    @app.errorhandler(SantaError)
    def handle_santa_error(e: SantaError):
        return jsonify(success=False, message=e.message), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return jsonify(success=False, message=e.description), e.code

    return app
