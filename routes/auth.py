from flask import Blueprint, request, jsonify, current_app, g
from sqlalchemy import select

from models import db
from models.user import User
from security.csrf import clear_csrf_token, issue_csrf_token
from security.password import hash_password, verify_password
from security.session import create_session, revoke_other_sessions, revoke_session
from services.schemas import LoginPayload, ProfileUpdatePayload, RegisterPayload, parse_body
from utils.audit import log_event
from utils.auth_context import login_required


auth_bp = Blueprint("auth", __name__, url_prefix="/accounts")


def _find_user(email: str):
    return db.session.execute(select(User).where(User.email == email)).scalar_one_or_none()


@auth_bp.post("/register")
def register():
    body = parse_body(RegisterPayload, request.get_json(silent=True))

    if _find_user(body.email):
        log_event("REGISTER_FAIL_EMAIL_EXISTS", metadata={"email": body.email})
        return jsonify(error="Email already registered"), 409

    user = User(
        email=body.email,
        password_hash=hash_password(body.password),
        first_name=body.first_name,
        last_name=body.last_name,
        phone_number=body.phone_number,
    )
    db.session.add(user)
    db.session.commit()
    log_event("REGISTER_SUCCESS", user_id=user.id)

    return jsonify(message="User registered successfully", user=user.to_dict()), 201


@auth_bp.post("/login")
def login():
    body = parse_body(LoginPayload, request.get_json(silent=True))
    email = body.email.lower()

    user = _find_user(email)
    if not user or not verify_password(body.password, user.password_hash):
        log_event("LOGIN_FAIL", user_id=user.id if user else None, metadata={"email": email})
        return jsonify(error="Invalid credentials"), 401

    raw_token = create_session(user.id)
    cookie_name = current_app.config.get("AUTH_COOKIE_NAME", "tripbooking_session")
    max_age = current_app.config.get("SESSION_LIFETIME_SECONDS", 8 * 60 * 60)

    resp = jsonify(message="Login successful", user=user.to_dict())
    resp.set_cookie(
        cookie_name,
        raw_token,
        httponly=True,
        secure=current_app.config.get("SESSION_COOKIE_SECURE", False),
        samesite=current_app.config.get("SESSION_COOKIE_SAMESITE", "Lax"),
        max_age=max_age,
        path="/",
    )
    resp = issue_csrf_token(resp)

    log_event("LOGIN_SUCCESS", user_id=user.id)
    return resp, 200


@auth_bp.get("/me")
@login_required
def me():
    return jsonify(g.user.to_dict()), 200


@auth_bp.post("/logout")
@login_required
def logout():
    cookie_name = current_app.config.get("AUTH_COOKIE_NAME", "tripbooking_session")
    raw_token = request.cookies.get(cookie_name)

    revoke_session(raw_token)
    log_event("LOGOUT", user_id=g.user.id)

    resp = jsonify(message="Logged out")
    resp.delete_cookie(cookie_name, path="/")
    clear_csrf_token(resp)
    return resp, 200


@auth_bp.put("/editProfile")
@login_required
def edit_profile():
    body = parse_body(ProfileUpdatePayload, request.get_json(silent=True))

    if not verify_password(body.password, g.user.password_hash):
        log_event("PROFILE_UPDATE_FAIL", user_id=g.user.id)
        return jsonify(error="Invalid credentials"), 401

    email_changed = bool(body.new_email) and body.new_email != g.user.email
    if email_changed:
        if _find_user(body.new_email):
            return jsonify(error="Email already registered"), 409
        g.user.email = body.new_email
    if body.phone_number:
        g.user.phone_number = body.phone_number
    if body.new_password:
        g.user.password_hash = hash_password(body.new_password)

    db.session.commit()

    revoked = 0
    if body.new_password:
        revoked = revoke_other_sessions(g.user.id, keep_session_id=g.session.id)
    log_event("PROFILE_UPDATE", user_id=g.user.id, metadata={
        "email_changed": email_changed,
        "password_changed": bool(body.new_password),
        "revoked_sessions": revoked,
    })
    return jsonify(success=True, user=g.user.to_dict()), 200
