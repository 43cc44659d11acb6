# cloudvault_app/blueprints/files.py
# -*- coding: utf-8 -*-
from __future__ import annotations
from flask import Blueprint, jsonify, request

from cloudvault_app.blueprints import as_bool, current_session, file_json, payload, text
from cloudvault_app.decorators import login_required
from cloudvault_app.errors import InvalidFieldValue, InvalidFileName
from cloudvault_app.extensions import get_engine
from cloudvault_app.services.formatting import human_size

bp = Blueprint("files", __name__)


def _storage_summary() -> dict:
    account = get_engine().current_account(current_session())
    return {
        "used_mb": account.used_storage_mb,
        "limit_mb": account.storage_limit_mb,
        "used": human_size(account.used_storage_mb),
        "limit": human_size(account.storage_limit_mb),
    }


@bp.route("/files", methods=["GET"])
@login_required
def list_files():
    files = get_engine().list_files(current_session())
    return jsonify({
        "storage": _storage_summary(),
        "files": [file_json(i, r) for i, r in enumerate(files, start=1)],
    })


@bp.route("/files", methods=["POST"])
@login_required
def upload():
    data = payload()
    record = get_engine().upload(
        current_session(),
        name=text(data, "name", InvalidFileName),
        size_mb=data.get("size_mb"),
        region=data.get("region", "GLOBAL"),
        description=text(data, "description", InvalidFieldValue),
        is_public=as_bool(data.get("is_public")),
        encrypted_at_rest=as_bool(data.get("encrypted_at_rest")),
    )
    return jsonify({"file": file_json(None, record), "storage": _storage_summary()}), 201


@bp.route("/files/<int:number>", methods=["DELETE"])
@login_required
def delete(number: int):
    removed = get_engine().delete_file(current_session(), number)
    return jsonify({"deleted": file_json(None, removed), "storage": _storage_summary()})


@bp.route("/files/search")
@login_required
def search():
    term = request.args.get("q", "")
    found = get_engine().search_files(current_session(), term)
    return jsonify({"term": term, "count": len(found), "files": [file_json(None, r) for r in found]})


@bp.route("/files/public")
@login_required
def public():
    found = get_engine().public_files(current_session())
    return jsonify({"count": len(found), "files": [file_json(None, r) for r in found]})
