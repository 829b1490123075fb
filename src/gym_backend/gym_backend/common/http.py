"""Flask glue shared by every controller: JSON envelopes, bearer-token guard, error mapping."""
from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Callable, Optional

from flask import Flask, g, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    EmailNotVerifiedError,
    NotFoundError,
    ValidationError,
)
from .pagination import Page
from .serializers import to_json

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: list[tuple[type, int]] = [
    (NotFoundError, 404),
    (ConflictError, 409),
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (EmailNotVerifiedError, 403),
]


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def ok(data: Any = None, *, status: int = 200, message: Optional[str] = None, **extra):
    body: dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = to_json(data)
    body.update({k: to_json(v) for k, v in extra.items()})
    return jsonify(body), status


def paged(page: Page, *, items: Any = None):
    return ok(page.items if items is None else items, pagination=page.meta())


def status_for(error: DomainError) -> int:
    for cls, status in _STATUS_BY_ERROR:
        if isinstance(error, cls):
            return status
    return 400


def error_body(error: DomainError) -> dict:
    body: dict[str, Any] = {"success": False, "message": error.message}
    code = getattr(error, "code", None)
    if code:
        body["code"] = code
    body.update({k: to_json(v) for k, v in error.details.items()})
    return body


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def _domain_error(e: DomainError):
        return jsonify(error_body(e)), status_for(e)

    @app.errorhandler(HTTPException)
    def _http_error(e: HTTPException):
        return jsonify({"success": False, "message": e.description}), e.code

    @app.errorhandler(Exception)
    def _unexpected(e: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"success": False, "message": "Internal server error", "error": str(e)}), 500


def bearer_token() -> Optional[str]:
    header = request.headers.get("Authorization", "")
    if header.startswith("Bearer "):
        return header[7:].strip() or None
    return None


def make_role_guard(verify_token: Callable[[str], dict]):
    """Build a `roles_required(*roles)` decorator around an access-token verifier.

    Missing/invalid token -> 401, role not listed -> 403. Claims are exposed as `g.user`.
    With no roles given, any authenticated user passes.
    """

    def roles_required(*roles: Role):
        allowed = {r.value for r in roles}

        def decorator(view):
            @wraps(view)
            def wrapper(*args, **kwargs):
                token = bearer_token()
                if not token:
                    raise AuthenticationError("Missing or malformed token")
                claims = verify_token(token)
                if allowed and claims.get("role") not in allowed:
                    raise AuthorizationError("Access denied")
                g.user = claims
                return view(*args, **kwargs)

            return wrapper

        return decorator

    return roles_required
