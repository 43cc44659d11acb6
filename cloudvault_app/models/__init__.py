# cloudvault_app/models/__init__.py
# -*- coding: utf-8 -*-
from .account import (
    Account,
    AccountSummary,
    Profile,
    Role,
    SecurityDashboard,
    GENDERS,
    ROLE_LABELS,
    STORAGE_LIMITS_MB,
)
from .file import FileRecord, FileType, Region, detect_file_type, new_file_id
from .session import MfaChallenge, Session


__all__ = [
    "Account",
    "AccountSummary",
    "Profile",
    "Role",
    "SecurityDashboard",
    "GENDERS",
    "ROLE_LABELS",
    "STORAGE_LIMITS_MB",
    "FileRecord",
    "FileType",
    "Region",
    "detect_file_type",
    "new_file_id",
    "MfaChallenge",
    "Session",
]
