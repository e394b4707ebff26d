#!/usr/bin/env python3
"""Flask control API for the content wall.

Lets operators and other systems see what the wall is doing and ask it
to switch modules. Request handlers run on Flask's threads; switches are
posted through the wall's EventBus and executed on the loop thread.

Endpoints:
- GET  /api/status   -- state, module on screen, active modules, playlist
- GET  /api/modules  -- module names in the library
- POST /api/play     -- {"module": name, "delay_ms"?: n, "hold_ms"?: n}
- GET  /api/monitor  -- recent monitoring observations (?limit=n)

No auth. Intended for the wall's private network.
"""

import logging

from flask import Flask, jsonify, request
from flask_cors import CORS

from core.errors import ModuleNotRegisteredError

logger = logging.getLogger(__name__)


def _optional_number(payload, key):
    value = payload.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
        raise ValueError(f"{key} must be a non-negative number")
    return float(value)


def create_app(wall) -> Flask:
    """Build the Flask app bound to a running Wall."""
    app = Flask(__name__)
    CORS(app)  # Allow CORS for local dev

    @app.route("/api/status")
    def status():
        return jsonify(wall.status())

    @app.route("/api/modules")
    def modules():
        library = wall.library
        return jsonify({
            "modules": [
                {"name": name, "title": library.resolve(name).title,
                 "loaded": library.resolve(name).loaded}
                for name in library.names()
            ]
        })

    @app.route("/api/play", methods=["POST"])
    def play():
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict) or not isinstance(payload.get("module"), str):
            return jsonify({"error": "expected JSON body with a 'module' name"}), 400
        try:
            delay_ms = _optional_number(payload, "delay_ms")
            hold_ms = _optional_number(payload, "hold_ms")
        except ValueError as exc:
            return jsonify({"error": str(exc)}), 400

        name = payload["module"]
        try:
            wall.post_switch(name, delay_ms=delay_ms, hold_ms=hold_ms)
        except ModuleNotRegisteredError as exc:
            logger.warning("Rejected switch request: %s", exc)
            return jsonify({"error": str(exc)}), 404

        logger.info("Switch to %s queued (delay=%s)", name, delay_ms)
        return jsonify({"accepted": True, "module": name}), 202

    @app.route("/api/monitor")
    def monitor():
        limit = request.args.get("limit", default=50, type=int)
        return jsonify({
            "enabled": wall.monitor.is_enabled(),
            "observations": wall.monitor.history(limit),
        })

    return app
