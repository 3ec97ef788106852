from __future__ import annotations

import logging
from functools import wraps
from typing import Any

from flask import jsonify, request

from ..common.serialization import dump
from ..core.exceptions import DomainError

logger = logging.getLogger(__name__)


def json_ok(data: Any, status: int = 200):
    return jsonify(dump(data)), status


def api_errors(failure_message: str):
    """Map domain errors to {"error": msg} with their status; anything else to a logged 500."""

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                return view(*args, **kwargs)
            except DomainError as e:
                return jsonify({"error": str(e)}), e.status_code
            except Exception:
                logger.exception(failure_message)
                return jsonify({"error": failure_message}), 500

        return wrapper

    return decorator


def json_body() -> dict:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}
