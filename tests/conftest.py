# tests/conftest.py
# -*- coding: utf-8 -*-
import os
import sys
import logging
import pathlib

import pytest


# =====================================================================================
# Project root on sys.path (so "cloudvault_app" and "config" import without install)
# =====================================================================================
def _add_project_root():
    here = pathlib.Path(__file__).resolve()
    for candidate in [here.parent, *here.parents]:
        if (candidate / "cloudvault_app").is_dir():
            if str(candidate) not in sys.path:
                sys.path.insert(0, str(candidate))
            return candidate
    return None


PROJECT_ROOT = _add_project_root()

from config import TestingConfig  # noqa: E402
from cloudvault_app import create_app  # noqa: E402
from cloudvault_app.services.account_engine import AccountEngine  # noqa: E402
from cloudvault_app.services.audit import AUDIT_LOGGER  # noqa: E402
from cloudvault_app.services.credentials import CredentialCodec  # noqa: E402
from cloudvault_app.services.file_store import FileStore  # noqa: E402
from cloudvault_app.services.user_store import UserStore  # noqa: E402

PASSWORD = "Password1"
MFA_CODE = "123456"


@pytest.fixture(autouse=True, scope="session")
def _testing_env():
    os.environ["APP_ENV"] = "testing"
    os.environ["FLASK_ENV"] = "testing"
    os.environ.setdefault("SECRET_KEY", "testing-secret")
    yield


# =====================================================================================
# Fakes: clock and audit sink
# =====================================================================================
class FakeClock:
    def __init__(self, now=1_700_000_000):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class RecordingAuditSink:
    def __init__(self):
        self.events = []

    def record(self, event, detail):
        self.events.append((event.value, detail))

    def kinds(self):
        return [kind for kind, _ in self.events]


# =====================================================================================
# Engine built directly over temporary stores (no Flask)
# =====================================================================================
@pytest.fixture
def users(tmp_path):
    return UserStore(tmp_path / "cloud_users.dat")


@pytest.fixture
def files(tmp_path):
    return FileStore(tmp_path / "cloud_data")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def audit():
    return RecordingAuditSink()


@pytest.fixture
def codec():
    return CredentialCodec(rounds=4)


@pytest.fixture
def engine(users, files, codec, audit, clock):
    return AccountEngine(
        users, files, codec=codec, audit=audit, clock=clock,
        mfa_code_factory=lambda: MFA_CODE,
        mfa_delivery=lambda username, code: None,
    )


def register(engine, username="alice", password=PASSWORD, **kw):
    params = dict(full_name="Alice Liddell", age=30, gender="F")
    params.update(kw)
    return engine.register(username, password, password, **params)


@pytest.fixture
def register_user():
    return register


@pytest.fixture
def alice(engine):
    """Session of a freshly registered Basic user ``alice``."""
    register(engine)
    return engine.login("alice", PASSWORD)


@pytest.fixture
def admin(engine):
    """Session of the administrator ``root``."""
    register(engine, "root", full_name="Root Admin", age=50, gender="M")
    engine.promote_to_admin("root")
    return engine.login("root", PASSWORD)


# =====================================================================================
# Flask app over temporary storage
# =====================================================================================
@pytest.fixture
def app(tmp_path):
    overrides = {
        "USERS_FILE": str(tmp_path / "app_users.dat"),
        "DATA_DIR": str(tmp_path / "app_data"),
        "AUDIT_LOG_FILE": str(tmp_path / "app_system.log"),
    }
    app = create_app(TestingConfig, overrides)
    yield app

    audit_logger = logging.getLogger(AUDIT_LOGGER)
    for h in list(audit_logger.handlers):
        if isinstance(h, logging.FileHandler) and h.baseFilename.startswith(str(tmp_path)):
            audit_logger.removeHandler(h)
            h.close()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def app_engine(app):
    return app.extensions["engine"]


@pytest.fixture
def logged_client_user(client, app_engine):
    register(app_engine, "bob", full_name="Bob Builder", age=45, gender="M")
    r = client.post("/login", json={"username": "bob", "password": PASSWORD})
    assert r.status_code == 200
    return client


@pytest.fixture
def logged_client_admin(client, app_engine):
    register(app_engine, "root", full_name="Root Admin", age=50, gender="M")
    app_engine.promote_to_admin("root")
    r = client.post("/login", json={"username": "root", "password": PASSWORD})
    assert r.status_code == 200
    return client
