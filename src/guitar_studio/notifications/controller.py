from __future__ import annotations

from flask import Flask, jsonify

from ..web.responses import api_errors
from .toast import drain_toasts


def register(app: Flask, container) -> None:
    @app.route("/api/toasts", methods=["GET"], endpoint="api_toasts")
    @api_errors("Failed to fetch toasts")
    def list_toasts():
        return jsonify(drain_toasts())
