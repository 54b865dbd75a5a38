from dataclasses import dataclass
from functools import wraps
from flask import g, jsonify
from security.session import get_session_from_request


@dataclass(frozen=True)
class Identity:
    """What the booking core knows about the caller."""

    user_id: int
    email: str
    role: str


def load_current_user():
    g.user = None
    g.session = None
    g.identity = None

    sess = get_session_from_request()
    if not sess or sess.user is None:
        return
    g.session = sess
    g.user = sess.user
    g.identity = Identity(user_id=sess.user.id, email=sess.user.email, role=sess.user.role)


def current_identity():
    return getattr(g, "identity", None)


def login_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if current_identity() is None:
            return jsonify(error="Unauthorized"), 401
        return fn(*args, **kwargs)
    return wrapper
