# cloudvault_app/blueprints/admin/routes.py
# -*- coding: utf-8 -*-
from __future__ import annotations
from flask import jsonify

from ..admin import admin_bp
from ...decorators import admin_required
from .. import current_session
from ...extensions import get_engine
from ...services.formatting import human_size


@admin_bp.route("/accounts")
@admin_required
def accounts():
    rows = [
        {
            "username": s.username,
            "role": s.role.label,
            "used_mb": s.used_storage_mb,
            "storage": human_size(s.used_storage_mb),
            "limit": human_size(s.storage_limit_mb),
            "locked": s.locked,
            "active": s.active,
            "mfa_enabled": s.mfa_enabled,
        }
        for s in get_engine().list_accounts(current_session())
    ]
    return jsonify({"accounts": rows})


@admin_bp.route("/accounts/<username>/unlock", methods=["POST"])
@admin_required
def unlock(username: str):
    account = get_engine().unlock(current_session(), username)
    return jsonify({"status": "unlocked", "username": account.username})


@admin_bp.route("/dashboard")
@admin_required
def dashboard():
    d = get_engine().security_dashboard(current_session())
    return jsonify({
        "total_accounts": d.total_accounts,
        "locked_accounts": d.locked_accounts,
        "premium_accounts": d.premium_accounts,
        "total_used_mb": d.total_used_mb,
        "total_used": human_size(d.total_used_mb),
    })
