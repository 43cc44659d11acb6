# cloudvault_app/errors.py
# -*- coding: utf-8 -*-
"""
Error taxonomy for the account engine and its stores.

Every error carries a stable ``code`` (used in JSON responses and tests) and
the HTTP ``status_code`` the blueprints answer with.
"""
from __future__ import annotations


class CloudVaultError(Exception):
    """Base class of every error the core raises on purpose."""

    code = "error"
    status_code = 400
    default_message = "Operation failed."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message}


# ---------------- validation (bad input shape) ----------------
class ValidationError(CloudVaultError):
    code = "validation_error"
    status_code = 400
    default_message = "Invalid input."


class InvalidUsername(ValidationError):
    code = "invalid_username"
    default_message = "Username must be at least 3 characters."


class DuplicateUsername(ValidationError):
    code = "duplicate_username"
    status_code = 409
    default_message = "Username already exists."


class WeakPassword(ValidationError):
    code = "weak_password"
    default_message = "Password must have at least 8 characters with letters and digits."


class PasswordMismatch(ValidationError):
    code = "password_mismatch"
    default_message = "Passwords do not match."


class InvalidAge(ValidationError):
    code = "invalid_age"
    default_message = "Invalid age. Please enter a number between 1 and 120."


class InvalidGender(ValidationError):
    code = "invalid_gender"
    default_message = "Please enter M or F."


class InvalidFieldValue(ValidationError):
    code = "invalid_field"
    default_message = "Field contains characters that cannot be stored."


class InvalidFileName(ValidationError):
    code = "invalid_file_name"
    default_message = "File name cannot be empty."


class InvalidSize(ValidationError):
    code = "invalid_size"
    default_message = "Invalid size. Please enter a positive number."


# ---------------- authentication ----------------
class AuthenticationError(CloudVaultError):
    code = "authentication_failed"
    status_code = 401
    default_message = "Authentication failed."


class BadCredentials(AuthenticationError):
    code = "bad_credentials"
    default_message = "Invalid credentials."


class MfaFailed(AuthenticationError):
    code = "mfa_failed"
    default_message = "Invalid MFA code."


class NotLoggedIn(AuthenticationError):
    code = "not_logged_in"
    default_message = "Log in to continue."


# ---------------- policy ----------------
class PolicyError(CloudVaultError):
    code = "policy_violation"
    status_code = 403
    default_message = "Operation not allowed."


class AccountLocked(PolicyError):
    code = "account_locked"
    status_code = 423
    default_message = "Account is locked due to too many failed attempts."


class AccountInactive(PolicyError):
    code = "account_inactive"
    default_message = "Account is deactivated."


class QuotaExceeded(PolicyError):
    code = "quota_exceeded"
    default_message = "Storage limit exceeded."


class PermissionDenied(PolicyError):
    code = "permission_denied"
    default_message = "Admin only."


class AlreadyMaxTier(PolicyError):
    code = "already_max_tier"
    status_code = 409
    default_message = "You are already Premium."


class NotEligible(PolicyError):
    code = "not_eligible"
    status_code = 409
    default_message = "Admins already have max storage."


# ---------------- not found ----------------
class NotFoundError(CloudVaultError):
    code = "not_found"
    status_code = 404
    default_message = "Not found."


class AccountNotFound(NotFoundError):
    code = "account_not_found"
    default_message = "User not found."


class RecordNotFound(NotFoundError):
    code = "record_not_found"
    default_message = "File not found."


# ---------------- storage ----------------
class StorageError(CloudVaultError, OSError):
    """Durable medium could not be read or written. Also an ``IOError``."""

    code = "storage_error"
    status_code = 503
    default_message = "Storage unavailable."

    def __init__(self, message: str | None = None):
        CloudVaultError.__init__(self, message)

    def __str__(self) -> str:
        return self.message


class CorruptRecordError(StorageError):
    code = "corrupt_record"
    default_message = "Stored record could not be parsed."
