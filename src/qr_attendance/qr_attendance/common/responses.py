"""Mapping from domain errors to JSON responses."""

from __future__ import annotations

import logging

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.exceptions import (
    AlreadyMarked,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    NotEnrolled,
    NotFoundError,
    ScanRejected,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = [
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
]


def status_for(exc: DomainError) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status
    return 400


def scan_failure(exc: ScanRejected):
    """``{ok: false, reason}``; a repeat scan is a normal outcome, not an HTTP error."""
    if isinstance(exc, AlreadyMarked):
        status = 200
    elif isinstance(exc, NotEnrolled):
        status = 403
    else:
        status = 400
    return jsonify({"ok": False, "reason": exc.reason, "message": str(exc)}), status


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ScanRejected)
    def _scan_rejected(exc: ScanRejected):
        return scan_failure(exc)

    @app.errorhandler(DomainError)
    def _domain_error(exc: DomainError):
        return jsonify({"success": False, "message": str(exc)}), status_for(exc)

    @app.errorhandler(Exception)
    def _unexpected(exc: Exception):
        if isinstance(exc, HTTPException):
            return jsonify({"success": False, "message": exc.description}), exc.code
        logger.exception("Unhandled error")
        return jsonify({"success": False, "message": "Internal server error"}), 500


def json_body() -> dict:
    """Request JSON object, or ``{}`` for a missing or non-object body."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}
