"""REST API: POST a URL, get the graded header report back as JSON."""

import logging
import os
from typing import Any

from flask import Flask, jsonify, request

from .config import DEFAULTS, VERSION, scoring_config
from .engine import run_scan
from .registry import build_registry
from .report import to_dict


logger = logging.getLogger(__name__)

ALLOWED_HTTP_OPTIONS = ("timeout", "user_agent", "method")
ALLOWED_METHODS = ("GET", "HEAD")


def _check_options(options: dict[str, Any]) -> str | None:
    """Return an error message for unusable scan options, or None."""
    if "timeout" in options:
        timeout = options["timeout"]
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            return "timeout must be a positive number"
    if "method" in options:
        method = options["method"]
        if not isinstance(method, str) or method.upper() not in ALLOWED_METHODS:
            return f"method must be one of {', '.join(ALLOWED_METHODS)}"
    if "user_agent" in options and not isinstance(options["user_agent"], str):
        return "user_agent must be a string"
    return None


def create_app(config: dict[str, Any] | None = None) -> Flask:
    config = config or DEFAULTS
    scoring = scoring_config(config)
    registry = build_registry(scoring.weights)

    app = Flask(__name__)

    @app.get("/api")
    def info():
        return jsonify({
            "name": "headergrade",
            "version": VERSION,
            "description": "HTTP security header grader",
        })

    @app.post("/scan")
    @app.post("/api/scan")
    def scan():
        body = request.get_json(silent=True) or {}
        url = body.get("url")
        if not url or not isinstance(url, str):
            return jsonify({"error": "URL is required"}), 400

        options = body.get("options") or {}
        if not isinstance(options, dict):
            return jsonify({"error": "options must be an object"}), 400
        error = _check_options(options)
        if error:
            return jsonify({"error": error}), 400
        http_cfg = {**(config.get("http") or {})}
        http_cfg.update({k: options[k] for k in ALLOWED_HTTP_OPTIONS if k in options})

        logger.info("API: starting scan for %s", url)
        result = run_scan(
            url,
            config={**config, "http": http_cfg},
            registry=registry,
            scoring=scoring,
        )
        return jsonify(to_dict(result))

    return app


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    create_app().run(port=int(os.environ.get("PORT", 3000)))
