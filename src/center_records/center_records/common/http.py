from __future__ import annotations

import logging
from functools import wraps

from flask import Flask, jsonify, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthorizationError,
    DomainError,
    NotFoundError,
    PreconditionError,
    SpreadsheetError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Localized headline per HTTP status; the exception text goes in "error".
_MESSAGES = {
    400: "خطأ في معالجة الطلب",
    401: "يجب تسجيل الدخول أولاً",
    403: "غير مصرح لك بتنفيذ هذا الإجراء",
    404: "العنصر المطلوب غير موجود",
    500: "حدث خطأ في الخادم",
}


def status_for(error: Exception) -> int:
    if isinstance(error, (PreconditionError, SpreadsheetError, ValidationError)):
        return 400
    if isinstance(error, AuthorizationError):
        return 403
    if isinstance(error, NotFoundError):
        return 404
    return 500


def error_response(error: Exception, *, message: str | None = None):
    status = status_for(error)
    body = {"status": "error", "message": message or _MESSAGES[status], "error": str(error)}
    expected = getattr(error, "expected", None)
    if expected is not None:
        body["expected"] = expected
        body["found"] = getattr(error, "found", [])
        body["missing"] = getattr(error, "missing", [])
    return jsonify(body), status


def current_role() -> Role:
    """Role of the signed-in user; the login layer stores it in the Flask session."""

    try:
        return Role(session.get("role"))
    except ValueError:
        return Role.STAFF


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"status": "error", "message": _MESSAGES[401], "error": "Access token required"}), 401
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"status": "error", "message": _MESSAGES[401], "error": "Access token required"}), 401
        if session.get("role") != Role.ADMIN.value:
            return error_response(AuthorizationError("Admin access required"))
        return view(*args, **kwargs)

    return wrapper


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        if status_for(e) == 500:
            logger.error("Request failed: %s", e)
        return error_response(e)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        # Flask routing errors (404/405) keep their own responses.
        code = getattr(e, "code", None)
        if isinstance(code, int) and code < 500:
            return jsonify({"status": "error", "message": _MESSAGES.get(code, _MESSAGES[400]), "error": str(e)}), code
        logger.exception("Unhandled error")
        return error_response(e)
