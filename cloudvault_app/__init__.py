# cloudvault_app/__init__.py
# -*- coding: utf-8 -*-
from __future__ import annotations

import os

from flask import Flask, jsonify
from config import Config, TestingConfig, ProductionConfig
from .errors import CloudVaultError
from .extensions import init_extensions, register_cli, get_engine
from .blueprints.auth import bp as auth_bp
from .blueprints.files import bp as files_bp
from .blueprints.admin import admin_bp
from datetime import datetime, timezone


def create_app(config_object: type[Config] | None = None, overrides: dict | None = None) -> Flask:
    app = Flask(__name__)

    if config_object is None:
        app_env = os.getenv("APP_ENV", "").lower()
        if app_env == "testing":
            config_object = TestingConfig
        elif app_env == "production":
            config_object = ProductionConfig
        else:
            config_object = Config
    app.config.from_object(config_object)
    if overrides:
        app.config.update(overrides)

    # Stores + engine, available in app.extensions["engine"]
    init_extensions(app)
    app.config["STARTED_AT"] = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")

    # Blueprints
    app.register_blueprint(auth_bp)
    app.register_blueprint(files_bp)
    app.register_blueprint(admin_bp, url_prefix="/admin")
    # CLI (ex.: flask create-admin root)
    register_cli(app)

    @app.errorhandler(CloudVaultError)
    def handle_cloudvault_error(e: CloudVaultError):
        if e.status_code >= 500:
            app.logger.error("Storage failure: %s", e.message)
        return jsonify(e.to_dict()), e.status_code

    return app


__all__ = ["create_app", "get_engine"]
