# cloudvault_app/services/account_engine.py
# -*- coding: utf-8 -*-
"""
Account engine: registration, login with lockout and MFA, quota-checked file
records, role upgrade and admin operations.

The engine holds no login state of its own: ``login`` / ``verify_mfa`` hand
back a ``Session`` value and every account-scoped operation takes one. Pending
MFA challenges are kept per challenge token. Every state change is written to
the stores before the call returns; when a write fails the in-memory view is
rolled back (or re-derived from the file list) so it never claims a mutation
the disk does not have.

Operations touching both stores persist the user's file list first and the
account table second. If the account write fails, the previous file list is
written back and the account's usage is re-derived from whatever file list
is durable at that point.
"""
from __future__ import annotations
import hmac
import logging
import math
import secrets
import threading
import time
from dataclasses import replace
from datetime import datetime
from functools import wraps
from typing import Callable, Dict, List, Optional, Tuple, Union

from ..errors import (
    AccountInactive,
    AccountLocked,
    AccountNotFound,
    AlreadyMaxTier,
    BadCredentials,
    DuplicateUsername,
    InvalidAge,
    InvalidFieldValue,
    InvalidFileName,
    InvalidGender,
    InvalidSize,
    InvalidUsername,
    MfaFailed,
    NotEligible,
    NotLoggedIn,
    PasswordMismatch,
    PermissionDenied,
    QuotaExceeded,
    RecordNotFound,
    StorageError,
    WeakPassword,
)
from ..models import (
    GENDERS,
    Account,
    AccountSummary,
    FileRecord,
    MfaChallenge,
    Profile,
    Region,
    Role,
    SecurityDashboard,
    Session,
    detect_file_type,
    new_file_id,
)
from .audit import AuditEvent, AuditSink, NullAuditSink
from .credentials import CredentialCodec
from .flatfile import is_storable
from .formatting import human_size
from .repositories import FileRepository, UserRepository

logger = logging.getLogger(__name__)

MAX_FAILED_LOGINS = 5
PASSWORD_MIN_LEN = 8
USERNAME_MIN_LEN = 3
MIN_AGE, MAX_AGE = 1, 120
EPSILON = 1e-6


def serialized(method):
    @wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)
    return wrapper


def _default_mfa_code() -> str:
    return f"{secrets.randbelow(10 ** 6):06d}"


def _log_mfa_delivery(username: str, code: str) -> None:
    logger.info("MFA code issued for %s (simulated delivery)", username)


class AccountEngine:
    def __init__(
        self,
        users: UserRepository,
        files: FileRepository,
        codec: Optional[CredentialCodec] = None,
        audit: Optional[AuditSink] = None,
        *,
        max_failed_logins: int = MAX_FAILED_LOGINS,
        password_min_len: int = PASSWORD_MIN_LEN,
        clock: Callable[[], float] = time.time,
        mfa_code_factory: Callable[[], str] = _default_mfa_code,
        mfa_delivery: Callable[[str, str], None] = _log_mfa_delivery,
    ):
        self.users = users
        self.files = files
        self.codec = codec or CredentialCodec()
        self.audit = audit or NullAuditSink()
        self.max_failed_logins = max_failed_logins
        self.password_min_len = password_min_len
        self._clock = clock
        self._mfa_code_factory = mfa_code_factory
        self._mfa_delivery = mfa_delivery
        # challenge token -> (username, expected code)
        self._challenges: Dict[str, Tuple[str, str]] = {}
        self._dummy_salt: Optional[str] = None
        self._lock = threading.RLock()

    # ---------------- session ----------------
    def current_account(self, session: Optional[Session]) -> Optional[Account]:
        if session is None or not session.is_active:
            return None
        return self.users.find(session.username)

    def has_pending_mfa(self, token: Optional[str]) -> bool:
        return isinstance(token, str) and token in self._challenges

    # ---------------- registration ----------------
    @serialized
    def register(self, username: str, password: str, confirm: str,
                 full_name: str, age, gender: str) -> Account:
        username = username or ""
        password = password or ""
        if len(username) < USERNAME_MIN_LEN:
            raise InvalidUsername()
        if not _valid_username(username):
            raise InvalidUsername("Username may not contain '|', '/', '\\', line breaks or start with '.'.")
        if self.users.exists(username):
            raise DuplicateUsername()

        has_alpha = any(c.isalpha() for c in password)
        has_digit = any(c.isdigit() for c in password)
        if len(password) < self.password_min_len or not (has_alpha and has_digit):
            raise WeakPassword(
                f"Password must have at least {self.password_min_len} characters with letters and digits."
            )
        if password != confirm:
            raise PasswordMismatch()

        full_name = (full_name or "").strip()
        if not is_storable(full_name):
            raise InvalidFieldValue("Full name may not contain '|' or line breaks.")
        age = _parse_age(age)
        if gender not in GENDERS:
            raise InvalidGender()

        salt = self.codec.derive_salt()
        account = Account(
            username=username,
            salt=salt,
            password_digest=self.codec.digest(salt, password),
            full_name=full_name,
            age=age,
            gender=gender,
            role=Role.BASIC,
            used_storage_mb=0.0,
            registered_at=int(self._clock()),
        )
        self._save_account(account)
        self._audit(AuditEvent.REGISTER, f"User={username}")
        return account

    # ---------------- login ----------------
    @serialized
    def login(self, username: str, password: str) -> Union[Session, MfaChallenge]:
        """
        Runs one login attempt.

        Returns the new ``Session`` or, when the account has MFA enabled, an
        ``MfaChallenge`` whose token must be presented to :meth:`verify_mfa`.
        """
        password = password or ""
        account = self.users.find(username)
        if account is None:
            self._burn_digest(password)
            self._audit(AuditEvent.LOGIN_FAIL, f"User={username} reason=not_found")
            raise BadCredentials()
        if not account.active:
            self._audit(AuditEvent.LOGIN_FAIL, f"User={username} reason=inactive")
            raise AccountInactive()
        if account.locked:
            self._audit(AuditEvent.LOGIN_FAIL, f"User={username} reason=locked")
            raise AccountLocked()

        if not self.codec.verify(account.salt, password, account.password_digest):
            failed = account.failed_login_count + 1
            locked = failed >= self.max_failed_logins
            self._save_account(replace(account, failed_login_count=failed, locked=locked))
            self._audit(AuditEvent.LOGIN_FAIL, f"User={username} reason=bad_password")
            if locked:
                self._audit(AuditEvent.LOCKOUT, f"User={username}")
                raise AccountLocked("Too many failed attempts. Account locked.")
            raise BadCredentials()

        if account.mfa_enabled:
            # a new password step replaces the user's older challenge
            self._drop_challenges_of(username)
            challenge = MfaChallenge(username, secrets.token_urlsafe(24))
            code = self._mfa_code_factory()
            self._challenges[challenge.token] = (username, code)
            self._mfa_delivery(username, code)
            return challenge
        return self._complete_login(account)

    @serialized
    def verify_mfa(self, token: Optional[str], code: str) -> Session:
        """Completes the challenge identified by ``token``. The challenge is spent either way."""
        pending = self._challenges.pop(token, None) if isinstance(token, str) else None
        if pending is None:
            raise NotLoggedIn("No login is waiting for an MFA code.")
        username, expected = pending
        if not hmac.compare_digest(str(code or "").strip().encode("utf-8"), expected.encode("utf-8")):
            self._audit(AuditEvent.LOGIN_FAIL, f"User={username} reason=mfa_failed")
            raise MfaFailed()

        account = self.users.find(username)
        if account is None:
            raise BadCredentials()
        if not account.active:
            raise AccountInactive()
        if account.locked:
            raise AccountLocked()
        return self._complete_login(account)

    def _complete_login(self, account: Account) -> Session:
        username = account.username
        self.files.reload_for(username)
        used = self._derived_usage(account)
        self._save_account(replace(
            account,
            failed_login_count=0,
            last_login_at=int(self._clock()),
            used_storage_mb=used,
        ))
        self._audit(AuditEvent.LOGIN_SUCCESS, f"User={username}")
        return Session(username)

    @serialized
    def logout(self, session: Optional[Session], mfa_token: Optional[str] = None) -> Session:
        """Ends ``session`` (and abandons ``mfa_token``). Returns the empty session."""
        if isinstance(mfa_token, str):
            self._challenges.pop(mfa_token, None)
        if session is not None and session.is_active:
            self._audit(AuditEvent.LOGOUT, f"User={session.username}")
        return Session()

    def _drop_challenges_of(self, username: str) -> None:
        for token in [t for t, (owner, _) in self._challenges.items() if owner == username]:
            del self._challenges[token]

    # ---------------- files ----------------
    @serialized
    def upload(self, session: Session, name: str, size_mb, region=Region.GLOBAL, description: str = "",
               is_public: bool = False, encrypted_at_rest: bool = False) -> FileRecord:
        account = self._require_account(session)
        name = (name or "").strip()
        if not name:
            raise InvalidFileName()
        size = _parse_size(size_mb)
        description = (description or "").strip()
        if not is_storable(name) or not is_storable(description):
            raise InvalidFieldValue("File name and description may not contain '|' or line breaks.")

        if account.used_storage_mb + size > account.storage_limit_mb:
            msg = f"Storage limit exceeded. Available: {human_size(account.available_mb)}."
            if account.role is Role.BASIC:
                msg += " Consider upgrading to Premium."
            raise QuotaExceeded(msg)

        username = account.username
        before = self.files.list_for(username)
        record = FileRecord(
            id=new_file_id(),
            name=name,
            owner=username,
            region=Region.parse(region),
            type=detect_file_type(name),
            uploaded_at=datetime.fromtimestamp(self._clock()).strftime("%Y-%m-%d %H:%M:%S"),
            size_mb=size,
            description=description,
            is_public=bool(is_public),
            encrypted_at_rest=bool(encrypted_at_rest),
        )
        self.files.append_for(username, record)
        self._commit_file_change(replace(account, used_storage_mb=account.used_storage_mb + size), before)
        self._audit(AuditEvent.UPLOAD, f"User={username} File={name}")
        return record

    @serialized
    def delete_file(self, session: Session, number: int) -> FileRecord:
        """Deletes the ``number``-th (1-based) record of the session user."""
        account = self._require_account(session)
        username = account.username
        before = self.files.list_for(username)
        try:
            removed = self.files.remove_for(username, int(number) - 1)
        except (IndexError, TypeError, ValueError):
            raise RecordNotFound(f"No file number {number}.") from None

        used = account.used_storage_mb - removed.size_mb
        if used < 0:
            if used < -EPSILON:
                logger.warning("Usage of %s would drop to %.6f MB after deleting %s; clamping to 0",
                               username, used, removed.id)
            used = 0.0
        self._commit_file_change(replace(account, used_storage_mb=used), before)
        self._audit(AuditEvent.DELETE, f"User={username} File={removed.name}")
        return removed

    @serialized
    def list_files(self, session: Session) -> List[FileRecord]:
        account = self._require_account(session)
        self.files.ensure_loaded(account.username)
        return self.files.list_for(account.username)

    @serialized
    def search_files(self, session: Session, term: str) -> List[FileRecord]:
        term = (term or "").strip()
        return [r for r in self.list_files(session) if r.matches(term)]

    @serialized
    def public_files(self, session: Session) -> List[FileRecord]:
        self._require_account(session)
        found: List[FileRecord] = []
        for owner in self.users.all():
            self.files.ensure_loaded(owner.username)
            found.extend(r for r in self.files.list_for(owner.username) if r.is_public)
        return found

    # ---------------- profile & role ----------------
    @serialized
    def profile(self, session: Session) -> Profile:
        a = self._require_account(session)
        return Profile(
            username=a.username,
            full_name=a.full_name,
            age=a.age,
            role=a.role,
            salutation=a.salutation(),
            registered_at=a.registered_at,
            last_login_at=a.last_login_at,
            failed_login_count=a.failed_login_count,
            locked=a.locked,
            mfa_enabled=a.mfa_enabled,
            used_storage_mb=a.used_storage_mb,
            storage_limit_mb=a.storage_limit_mb,
        )

    @serialized
    def toggle_mfa(self, session: Session) -> bool:
        account = self._require_account(session)
        updated = replace(account, mfa_enabled=not account.mfa_enabled)
        self._save_account(updated)
        return updated.mfa_enabled

    @serialized
    def upgrade(self, session: Session) -> Account:
        account = self._require_account(session)
        if account.role is Role.PREMIUM:
            raise AlreadyMaxTier()
        if account.role is Role.ADMIN:
            raise NotEligible()
        updated = replace(account, role=Role.PREMIUM)
        self._save_account(updated)
        self._audit(AuditEvent.UPGRADE, f"User={account.username}")
        return updated

    # ---------------- admin ----------------
    @serialized
    def list_accounts(self, session: Session) -> List[AccountSummary]:
        self._require_admin(session)
        return [AccountSummary.of(a) for a in self.users.all()]

    @serialized
    def unlock(self, session: Session, username: str) -> Account:
        admin = self._require_admin(session)
        target = self.users.find(username)
        if target is None:
            raise AccountNotFound()
        updated = replace(target, locked=False, failed_login_count=0)
        self._save_account(updated)
        self._audit(AuditEvent.ADMIN_ACTION, f"Admin={admin.username} unlocked {username}")
        return updated

    @serialized
    def security_dashboard(self, session: Session) -> SecurityDashboard:
        self._require_admin(session)
        total = locked = premium = 0
        used = 0.0
        for a in self.users.all():
            total += 1
            if a.locked:
                locked += 1
            if a.role is Role.PREMIUM:
                premium += 1
            used += a.used_storage_mb
        return SecurityDashboard(total, locked, premium, used)

    # Operator commands (CLI only): no session involved.
    @serialized
    def promote_to_admin(self, username: str) -> Account:
        target = self.users.find(username)
        if target is None:
            raise AccountNotFound()
        updated = replace(target, role=Role.ADMIN)
        self._save_account(updated)
        self._audit(AuditEvent.ADMIN_ACTION, f"Operator promoted {username} to admin")
        return updated

    @serialized
    def set_active(self, username: str, active: bool) -> Account:
        """Deactivated accounts fail every later session-scoped call with ``AccountInactive``."""
        target = self.users.find(username)
        if target is None:
            raise AccountNotFound()
        updated = replace(target, active=bool(active))
        self._save_account(updated)
        state = "activated" if updated.active else "deactivated"
        self._audit(AuditEvent.ADMIN_ACTION, f"Operator {state} {username}")
        return updated

    # ---------------- internals ----------------
    def _require_account(self, session: Optional[Session]) -> Account:
        account = self.current_account(session)
        if account is None:
            raise NotLoggedIn()
        if not account.active:
            raise AccountInactive()
        return account

    def _require_admin(self, session: Optional[Session]) -> Account:
        account = self._require_account(session)
        if not account.is_admin:
            raise PermissionDenied()
        return account

    def _save_account(self, updated: Account) -> None:
        previous = self.users.find(updated.username)
        self.users.upsert(updated)
        try:
            self.users.persist()
        except StorageError:
            if previous is None:
                self.users.discard(updated.username)
            else:
                self.users.upsert(previous)
            raise

    def _commit_file_change(self, updated: Account, before: List[FileRecord]) -> None:
        username = updated.username
        try:
            self.files.persist_for(username)
        except StorageError:
            self.files.reset_for(username, before)
            raise
        try:
            self._save_account(updated)
        except StorageError:
            self._roll_back_files(username, before)
            raise

    def _roll_back_files(self, username: str, before: List[FileRecord]) -> None:
        written = self.files.list_for(username)
        self.files.reset_for(username, before)
        try:
            self.files.persist_for(username)
        except StorageError:
            logger.exception("Could not restore the file list of %s; keeping the written one", username)
            self.files.reset_for(username, written)
        account = self.users.find(username)
        derived = self._derived_usage(account)
        if derived != account.used_storage_mb:
            self.users.upsert(replace(account, used_storage_mb=derived))

    def _derived_usage(self, account: Account) -> float:
        derived = sum(r.size_mb for r in self.files.list_for(account.username))
        if abs(derived - account.used_storage_mb) <= EPSILON:
            return account.used_storage_mb
        logger.warning("Usage of %s was %.6f MB but its files sum to %.6f MB; using the file list",
                       account.username, account.used_storage_mb, derived)
        return derived

    def _burn_digest(self, password: str) -> None:
        # unknown users cost the same hashing work as known ones
        if self._dummy_salt is None:
            self._dummy_salt = self.codec.derive_salt()
        self.codec.digest(self._dummy_salt, password)

    def _audit(self, event: AuditEvent, detail: str) -> None:
        try:
            self.audit.record(event, detail)
        except Exception:
            logger.exception("Audit sink failed for %s event", event.value)


def _valid_username(username: str) -> bool:
    return is_storable(username) and "/" not in username and "\\" not in username \
        and not username.startswith(".")


def _parse_age(value) -> int:
    if isinstance(value, bool):
        raise InvalidAge()
    try:
        age = int(str(value).strip())
    except (TypeError, ValueError):
        raise InvalidAge() from None
    if not MIN_AGE <= age <= MAX_AGE:
        raise InvalidAge()
    return age


def _parse_size(value) -> float:
    if isinstance(value, bool):
        raise InvalidSize()
    try:
        size = float(value)
    except (TypeError, ValueError):
        raise InvalidSize() from None
    if not math.isfinite(size) or size <= 0:
        raise InvalidSize()
    return size
