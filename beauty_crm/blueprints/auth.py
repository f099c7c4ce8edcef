"""Auth blueprint - /auth/*

JSON session login/logout for the CRM frontend. Service clients skip this
and send ``Authorization: Bearer <CRM_API_KEY>`` instead.
"""

import logging

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_user, logout_user
from werkzeug.security import check_password_hash

from beauty_crm.extensions import db, limiter
from beauty_crm.models.user import User
from beauty_crm.services.lifecycle import log_audit_event

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


def _user_payload(user):
    return {
        "id": user.id,
        "email": user.email,
        "full_name": user.full_name,
        "role": user.role,
        "region": user.region,
    }


# ──────────────────────────────────────────────
# POST /auth/login
# ──────────────────────────────────────────────

@auth_bp.route("/login", methods=["POST"])
@limiter.limit("10 per minute")
def login():
    """Email + password login. Body: {"email", "password", "remember"}."""
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").lower().strip()
    password = data.get("password") or ""
    remember = bool(data.get("remember"))

    if not email or not password:
        return jsonify({"error": "Email and password are required."}), 400

    user = User.query.filter_by(email=email).first()

    if user is None or not check_password_hash(user.password_hash, password):
        return jsonify({"error": "Invalid email or password."}), 401

    if not user.is_active:
        return jsonify({"error": "Your account has been deactivated."}), 403

    login_user(user, remember=remember)

    log_audit_event("user.logged_in", user.id)
    db.session.commit()

    logger.info(f"User {user.email} logged in")
    return jsonify({"user": _user_payload(user)})


# ──────────────────────────────────────────────
# POST /auth/logout
# ──────────────────────────────────────────────

@auth_bp.route("/logout", methods=["POST"])
def logout():
    if current_user.is_authenticated:
        logger.info(f"User {current_user.email} logged out")
    logout_user()
    return jsonify({"status": "logged_out"})


@auth_bp.route("/me")
def me():
    if not current_user.is_authenticated:
        return jsonify({"error": "Unauthorized"}), 401
    return jsonify({"user": _user_payload(current_user)})
