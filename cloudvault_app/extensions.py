# cloudvault_app/extensions.py
# -*- coding: utf-8 -*-
from __future__ import annotations
import logging
from pathlib import Path

import click
from flask import current_app

from .errors import CloudVaultError
from .services.account_engine import AccountEngine
from .services.audit import AUDIT_LOGGER, AuditEvent, LogAuditSink, audit_file_handler
from .services.credentials import CredentialCodec
from .services.file_store import FileStore
from .services.user_store import UserStore


def init_extensions(app):
    """Builds the stores and the account engine and keeps them in app.extensions."""
    _init_audit_log(app)

    users = UserStore(app.config["USERS_FILE"])
    files = FileStore(app.config["DATA_DIR"])
    users.reload()

    outbox = app.extensions.setdefault("mfa_outbox", {})

    def deliver_mfa(username, code):
        app.logger.info("MFA code sent to %s (simulated)", username)
        if app.config.get("MFA_ECHO_CODE"):
            outbox[username] = code

    engine = AccountEngine(
        users,
        files,
        codec=CredentialCodec(rounds=app.config.get("BCRYPT_LOG_ROUNDS", 12)),
        audit=LogAuditSink(),
        max_failed_logins=app.config.get("MAX_FAILED_LOGINS", 5),
        password_min_len=app.config.get("PASSWORD_MIN_LEN", 8),
        mfa_delivery=deliver_mfa,
    )
    app.extensions["engine"] = engine
    engine.audit.record(AuditEvent.SYSTEM, "Application started")


def _init_audit_log(app):
    audit_logger = logging.getLogger(AUDIT_LOGGER)
    audit_logger.setLevel(logging.INFO)
    path = app.config.get("AUDIT_LOG_FILE")
    if not path:
        return
    # one handler per file, even when create_app runs more than once
    target = str(Path(path).resolve())
    for h in audit_logger.handlers:
        if isinstance(h, logging.FileHandler) and h.baseFilename == target:
            return
    try:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        audit_logger.addHandler(audit_file_handler(path))
    except OSError as e:
        app.logger.warning("Audit log %s unavailable: %s", path, e)


def get_engine() -> AccountEngine:
    return current_app.extensions["engine"]


def register_cli(app):
    @app.cli.command("init-storage")
    def init_storage_cmd():
        """Creates the data directory and an empty users file."""
        Path(app.config["DATA_DIR"]).mkdir(parents=True, exist_ok=True)
        users_file = Path(app.config["USERS_FILE"])
        if not users_file.exists():
            app.extensions["engine"].users.persist()
        click.echo(f"Storage ready: {users_file} / {app.config['DATA_DIR']}")

    @app.cli.command("create-admin")
    @click.argument("username")
    @click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
    @click.option("--full-name", default="Administrator", show_default=True)
    @click.option("--age", default=30, type=int, show_default=True)
    @click.option("--gender", default="M", show_default=True)
    def create_admin_cmd(username, password, full_name, age, gender):
        """Registers USERNAME and promotes it to Administrator."""
        engine = app.extensions["engine"]
        try:
            engine.register(username, password, password, full_name, age, gender)
            engine.promote_to_admin(username)
        except CloudVaultError as e:
            raise click.ClickException(e.message)
        click.echo(f"Administrator {username} created.")

    @app.cli.command("set-active")
    @click.argument("username")
    @click.option("--active/--inactive", default=True)
    def set_active_cmd(username, active):
        """Activates or deactivates USERNAME."""
        engine = app.extensions["engine"]
        try:
            engine.set_active(username, active)
        except CloudVaultError as e:
            raise click.ClickException(e.message)
        click.echo(f"{username} is now {'active' if active else 'inactive'}.")
