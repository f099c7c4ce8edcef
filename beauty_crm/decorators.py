"""
Custom route decorators for access control.

- api_auth: accepts a Bearer token matching CRM_API_KEY (importers, the
  Fiori frontend proxy) OR a logged-in, active Flask-Login session.
- current_actor_id: user id to record on audit events, None for token calls.
"""

import hmac
from functools import wraps

from flask import current_app, jsonify, request
from flask_login import current_user


def api_auth(f):
    """Allow access via session OR a Bearer token matching CRM_API_KEY."""

    @wraps(f)
    def decorated(*args, **kwargs):
        # Check Bearer token first (service-to-service access)
        auth_header = request.headers.get("Authorization", "")
        if auth_header.startswith("Bearer "):
            token = auth_header[7:]
            expected = current_app.config.get("CRM_API_KEY") or ""
            if expected and hmac.compare_digest(token, expected):
                return f(*args, **kwargs)
            return jsonify({"error": "Invalid API key"}), 401

        # Fall back to session auth
        if not current_user.is_authenticated or not current_user.is_active:
            return jsonify({"error": "Unauthorized"}), 401
        return f(*args, **kwargs)

    return decorated


def current_actor_id():
    if current_user.is_authenticated:
        return current_user.id
    return None
