# cloudvault_app/blueprints/__init__.py
# -*- coding: utf-8 -*-
"""Helpers shared by the JSON blueprints."""
from __future__ import annotations
from flask import request, session

from ..errors import CloudVaultError
from ..models import FileRecord, Profile, Session
from ..services.formatting import human_size, timestamp_text


def payload() -> dict:
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def text(data: dict, key: str, error: type[CloudVaultError], default: str = "") -> str:
    """Returns ``data[key]`` when it is a string; any other JSON type raises ``error``."""
    value = data.get(key, default)
    if value is None:
        return default
    if not isinstance(value, str):
        raise error()
    return value


def as_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in ("1", "true", "y", "yes", "on")


# ---------------- cookie session ----------------
def current_session() -> Session:
    user = session.get("user") or {}
    return Session(user.get("username"))


def start_session(s: Session, full_name: str) -> None:
    session.pop("mfa_token", None)
    session["user"] = {"username": s.username, "name": full_name}


def file_json(number: int | None, r: FileRecord) -> dict:
    data = {
        "id": r.id,
        "name": r.name,
        "owner": r.owner,
        "type": r.type.label,
        "region": r.region.label,
        "size_mb": r.size_mb,
        "size": human_size(r.size_mb),
        "uploaded_at": r.uploaded_at,
        "description": r.description,
        "is_public": r.is_public,
        "encrypted_at_rest": r.encrypted_at_rest,
    }
    if number is not None:
        data["number"] = number
    return data


def profile_json(p: Profile) -> dict:
    return {
        "username": p.username,
        "full_name": p.full_name,
        "age": p.age,
        "role": p.role.label,
        "salutation": p.salutation,
        "member_since": timestamp_text(p.registered_at, "%Y-%m-%d"),
        "last_login": timestamp_text(p.last_login_at),
        "failed_login_count": p.failed_login_count,
        "locked": p.locked,
        "mfa_enabled": p.mfa_enabled,
        "storage": {
            "used_mb": p.used_storage_mb,
            "limit_mb": p.storage_limit_mb,
            "used": human_size(p.used_storage_mb),
            "limit": human_size(p.storage_limit_mb),
            "percent": round(p.usage_percent, 1),
        },
    }
