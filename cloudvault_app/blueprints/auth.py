# cloudvault_app/blueprints/auth.py
# -*- coding: utf-8 -*-
from __future__ import annotations

from flask import Blueprint, current_app, jsonify, session

from cloudvault_app.blueprints import current_session, payload, profile_json, start_session, text
from cloudvault_app.decorators import login_required
from cloudvault_app.errors import (
    BadCredentials,
    InvalidFieldValue,
    InvalidGender,
    InvalidUsername,
    MfaFailed,
    WeakPassword,
)
from cloudvault_app.extensions import get_engine
from cloudvault_app.models import MfaChallenge

bp = Blueprint("auth", __name__)


@bp.route("/register", methods=["POST"])
def register():
    data = payload()
    account = get_engine().register(
        username=text(data, "username", InvalidUsername),
        password=text(data, "password", WeakPassword),
        confirm=text(data, "confirm", WeakPassword),
        full_name=text(data, "full_name", InvalidFieldValue),
        age=data.get("age"),
        gender=text(data, "gender", InvalidGender),
    )
    return jsonify({
        "status": "created",
        "username": account.username,
        "message": f"Account created. Welcome, {account.salutation()} {account.full_name}!",
    }), 201


@bp.route("/login", methods=["POST"])
def login():
    data = payload()
    engine = get_engine()
    result = engine.login(
        text(data, "username", BadCredentials),
        text(data, "password", BadCredentials),
    )

    if isinstance(result, MfaChallenge):
        # the password step alone does not log this client in
        session.pop("user", None)
        session["mfa_token"] = result.token
        body = {
            "status": "mfa_required",
            "username": result.username,
            "message": "A 6-digit code was sent to your device (simulated).",
        }
        code = current_app.extensions.get("mfa_outbox", {}).pop(result.username, None)
        if code is not None:
            body["code"] = code  # demo only (MFA_ECHO_CODE)
        return jsonify(body), 202

    profile = engine.profile(result)
    start_session(result, profile.full_name)
    return jsonify({"status": "ok", "user": profile_json(profile)})


@bp.route("/login/mfa", methods=["POST"])
def login_mfa():
    engine = get_engine()
    token = session.pop("mfa_token", None)
    result = engine.verify_mfa(token, text(payload(), "code", MfaFailed))
    profile = engine.profile(result)
    start_session(result, profile.full_name)
    return jsonify({"status": "ok", "user": profile_json(profile)})


@bp.route("/logout", methods=["POST"])
def logout():
    get_engine().logout(current_session(), session.get("mfa_token"))
    session.clear()
    return jsonify({"status": "logged_out"})


@bp.route("/account")
@login_required
def account():
    return jsonify(profile_json(get_engine().profile(current_session())))


@bp.route("/account/mfa", methods=["POST"])
@login_required
def toggle_mfa():
    enabled = get_engine().toggle_mfa(current_session())
    return jsonify({"mfa_enabled": enabled})


@bp.route("/account/upgrade", methods=["POST"])
@login_required
def upgrade():
    account = get_engine().upgrade(current_session())
    return jsonify({"status": "upgraded", "role": account.role.label})
