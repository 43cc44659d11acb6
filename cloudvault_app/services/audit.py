# cloudvault_app/services/audit.py
# -*- coding: utf-8 -*-
from __future__ import annotations
import logging
from enum import Enum
from typing import Protocol

AUDIT_LOGGER = "cloudvault.audit"


class AuditEvent(str, Enum):
    SYSTEM = "system"
    REGISTER = "register"
    LOGIN_SUCCESS = "login-success"
    LOGIN_FAIL = "login-fail"
    LOCKOUT = "lockout"
    LOGOUT = "logout"
    UPLOAD = "upload"
    DELETE = "delete"
    UPGRADE = "upgrade"
    ADMIN_ACTION = "admin-action"

    @property
    def tag(self) -> str:
        return "ADMIN" if self is AuditEvent.ADMIN_ACTION else self.name


class AuditSink(Protocol):
    def record(self, event: AuditEvent, detail: str) -> None: ...


class LogAuditSink:
    """Writes audit events to the ``cloudvault.audit`` logger as ``[TAG] detail``."""

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger(AUDIT_LOGGER)

    def record(self, event: AuditEvent, detail: str) -> None:
        self.logger.info("[%s] %s", event.tag, detail)


class NullAuditSink:
    def record(self, event: AuditEvent, detail: str) -> None:
        return None


def audit_file_handler(path) -> logging.Handler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter("[%(asctime)s]%(message)s", datefmt="%Y-%m-%d %H:%M:%S"))
    return handler
