"""Tenant context middleware - Extract and attach tenant context for portal users."""

from functools import wraps
from flask import request, g
from typing import Optional


def with_tenant_context(f):
    """
    Decorator to extract tenant context from authenticated portal user.

    Requires portal authentication to be applied first.
    Attaches tenant_id, user_id, user_role and user_name to Flask's g object.

    Usage:
        @bp.route("/tenant-specific")
        @require_portal_auth
        @with_tenant_context
        def tenant_endpoint():
            tenant_id = g.tenant_id
            return {"tenant_id": tenant_id}
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        portal_user = getattr(request, "portal_user", None)

        if portal_user:
            g.tenant_id = portal_user.get("tenant_id")
            g.user_id = portal_user.get("user_id")
            g.user_role = portal_user.get("role")
            g.user_name = portal_user.get("name") or portal_user.get("email")

        return f(*args, **kwargs)

    return decorated_function


def get_current_tenant_id() -> Optional[int]:
    return getattr(g, "tenant_id", None)


def get_current_user_id() -> Optional[int]:
    return getattr(g, "user_id", None)


def get_current_user_name() -> Optional[str]:
    """Display name recorded as the actor on status history and letters."""
    return getattr(g, "user_name", None)
