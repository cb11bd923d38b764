from __future__ import annotations

import logging
from typing import Any

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.exceptions import DomainError, ValidationError

logger = logging.getLogger(__name__)


def success(data: Any = None, *, message: str = "OK", status: int = 200, **extra: Any):
    """JSON envelope used by every successful response."""
    body: dict[str, Any] = {"success": True, "message": message}
    if data is not None:
        body["data"] = data
    body.update(extra)
    return jsonify(body), status


def failure(message: str, *, status: int, error: Any = None):
    body: dict[str, Any] = {"success": False, "message": message}
    if error is not None:
        body["error"] = error
    return jsonify(body), status


def json_body() -> dict:
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def register_error_handlers(app: Flask) -> None:
    def expose() -> bool:
        return bool(app.config.get("EXPOSE_ERROR_DETAIL", False))

    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        if e.http_status >= 500:
            logger.error("%s %s failed: %s (%s)", request.method, request.path, e.message, e.detail)
        else:
            logger.warning("%s %s rejected: %s", request.method, request.path, e.message)

        error = None
        if expose():
            error = {"kind": e.kind.value, "reason": e.reason, "detail": e.detail}
        return failure(e.message, status=e.http_status, error=error)

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        messages = {404: "Route not found", 405: "Method not allowed"}
        message = messages.get(e.code or 500, e.name)
        return failure(message, status=e.code or 500, error=e.description if expose() else None)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return failure("Internal server error", status=500, error=str(e) if expose() else None)
