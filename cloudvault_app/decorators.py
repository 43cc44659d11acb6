# cloudvault_app/decorators.py
# -*- coding: utf-8 -*-
from __future__ import annotations
from functools import wraps
from flask import jsonify, session

from .extensions import get_engine
from .errors import NotLoggedIn, PermissionDenied
from .models import Session


def _not_logged_in():
    session.pop("user", None)
    return jsonify(NotLoggedIn().to_dict()), NotLoggedIn.status_code


def login_required(view_func):
    @wraps(view_func)
    def wrapper(*args, **kwargs):
        if not session.get("user"):
            return _not_logged_in()
        return view_func(*args, **kwargs)
    return wrapper


def admin_required(view_func):
    @wraps(view_func)
    def wrapper(*args, **kwargs):
        user = session.get("user")
        if not user:
            return _not_logged_in()
        account = get_engine().current_account(Session(user.get("username")))
        if account is None:
            return _not_logged_in()
        if not account.is_admin:
            return jsonify(PermissionDenied().to_dict()), PermissionDenied.status_code
        return view_func(*args, **kwargs)
    return wrapper
