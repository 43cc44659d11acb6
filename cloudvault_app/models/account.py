# cloudvault_app/models/account.py
# -*- coding: utf-8 -*-
from __future__ import annotations
from dataclasses import dataclass
from enum import IntEnum


class Role(IntEnum):
    # ordinal is the value written to the users file
    BASIC = 0
    PREMIUM = 1
    ADMIN = 2

    @property
    def storage_limit_mb(self) -> float:
        return STORAGE_LIMITS_MB[self]

    @property
    def label(self) -> str:
        return ROLE_LABELS[self]


STORAGE_LIMITS_MB = {
    Role.BASIC: 1024.0,
    Role.PREMIUM: 10240.0,
    Role.ADMIN: 102400.0,
}

ROLE_LABELS = {
    Role.BASIC: "Basic User",
    Role.PREMIUM: "Premium User",
    Role.ADMIN: "Administrator",
}

GENDERS = {"M", "m", "F", "f"}


@dataclass(frozen=True)
class Account:
    username: str
    salt: str
    password_digest: str
    full_name: str
    age: int
    gender: str
    role: Role = Role.BASIC
    used_storage_mb: float = 0.0
    registered_at: int = 0
    active: bool = True
    failed_login_count: int = 0
    locked: bool = False
    last_login_at: int = 0          # 0 = never
    mfa_enabled: bool = False

    @property
    def storage_limit_mb(self) -> float:
        return self.role.storage_limit_mb

    @property
    def available_mb(self) -> float:
        return max(self.storage_limit_mb - self.used_storage_mb, 0.0)

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    def salutation(self) -> str:
        male = self.gender in ("M", "m", "Male")
        if self.age > 40:
            return "Sir" if male else "Ma'am"
        return "Mr." if male else "Ms."


@dataclass(frozen=True)
class AccountSummary:
    username: str
    role: Role
    used_storage_mb: float
    storage_limit_mb: float
    locked: bool
    active: bool
    mfa_enabled: bool

    @classmethod
    def of(cls, account: Account) -> "AccountSummary":
        return cls(
            username=account.username,
            role=account.role,
            used_storage_mb=account.used_storage_mb,
            storage_limit_mb=account.storage_limit_mb,
            locked=account.locked,
            active=account.active,
            mfa_enabled=account.mfa_enabled,
        )


@dataclass(frozen=True)
class SecurityDashboard:
    total_accounts: int
    locked_accounts: int
    premium_accounts: int
    total_used_mb: float


@dataclass(frozen=True)
class Profile:
    username: str
    full_name: str
    age: int
    role: Role
    salutation: str
    registered_at: int
    last_login_at: int
    failed_login_count: int
    locked: bool
    mfa_enabled: bool
    used_storage_mb: float
    storage_limit_mb: float

    @property
    def usage_percent(self) -> float:
        return self.used_storage_mb / self.storage_limit_mb * 100.0
