import hmac
import secrets

from flask import current_app, g, request

from services.errors import Forbidden

UNSAFE_METHODS = ("POST", "PUT", "PATCH", "DELETE")

# paths a client hits before it holds a csrf cookie
CSRF_EXEMPT_PATHS = {
    "/accounts/login",
    "/accounts/register",
    "/health",
}


def _cookie_name():
    return current_app.config.get("CSRF_COOKIE_NAME", "csrf_token")


def _header_name():
    return current_app.config.get("CSRF_HEADER_NAME", "X-CSRF-Token")


def issue_csrf_token(resp):
    """Attach a fresh double-submit token; the client echoes it back in a header."""
    token = secrets.token_urlsafe(32)
    resp.set_cookie(
        _cookie_name(),
        token,
        httponly=False,  # read by client JS
        secure=current_app.config.get("SESSION_COOKIE_SECURE", False),
        samesite=current_app.config.get("SESSION_COOKIE_SAMESITE", "Lax"),
        max_age=current_app.config.get("SESSION_LIFETIME_SECONDS", 8 * 60 * 60),
        path="/",
    )
    return resp


def clear_csrf_token(resp):
    resp.delete_cookie(_cookie_name(), path="/")
    return resp


def csrf_protect():
    """Reject state-changing requests from a cookie session that lack a matching token."""
    if request.method not in UNSAFE_METHODS or request.path in CSRF_EXEMPT_PATHS:
        return
    # anonymous callers are turned away by login_required anyway
    if getattr(g, "user", None) is None:
        return

    cookie_token = request.cookies.get(_cookie_name())
    header_token = request.headers.get(_header_name())
    if not cookie_token or not header_token or not hmac.compare_digest(cookie_token, header_token):
        raise Forbidden("CSRF validation failed")
