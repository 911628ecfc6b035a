"""Portal user authentication middleware."""

from functools import wraps

import jwt
from flask import request, jsonify, current_app


def error_response(message: str, status: int = 401):
    """Helper to create error responses."""
    return jsonify({
        "error": "Unauthorized",
        "message": message,
        "status": status,
    }), status


def decode_access_token(token: str) -> dict:
    """
    Decode and validate a portal access token.

    Raises:
        ValueError: Token invalid, expired or missing the tenant claim
    """
    try:
        payload = jwt.decode(
            token,
            current_app.config["SECRET_KEY"],
            algorithms=[current_app.config.get("JWT_ALGORITHM", "HS256")],
        )
    except jwt.ExpiredSignatureError:
        raise ValueError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise ValueError(f"Invalid token: {e}")

    if payload.get("tenant_id") is None:
        raise ValueError("Token is missing tenant_id")
    return payload


def require_portal_auth(f):
    """
    Decorator to require Portal user authentication.

    Validates the bearer JWT and attaches its payload (tenant_id, user_id,
    role, name) to the request context.

    Usage:
        @bp.route("/portal-only")
        @require_portal_auth
        def portal_endpoint():
            user = request.portal_user
            return {"user_id": user["user_id"], "tenant_id": user["tenant_id"]}
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_header = request.headers.get("Authorization")

        if not auth_header:
            return error_response("Authorization header is required")

        parts = auth_header.split()

        if len(parts) != 2 or parts[0].lower() != "bearer":
            return error_response("Invalid Authorization header format. Use: Bearer <token>")

        try:
            request.portal_user = decode_access_token(parts[1])
        except ValueError as e:
            return error_response(str(e))

        return f(*args, **kwargs)

    return decorated_function
