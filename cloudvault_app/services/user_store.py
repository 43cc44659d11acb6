# cloudvault_app/services/user_store.py
# -*- coding: utf-8 -*-
from __future__ import annotations
from pathlib import Path
from typing import Dict, List, Optional

from ..errors import CorruptRecordError
from ..models import Account, Role
from . import flatfile

# username|salt|digest|full name|age|gender|role|used MB|registered|active|failed|locked|last login|mfa
FIELDS = 14


def encode_account(a: Account) -> str:
    return flatfile.join([
        a.username,
        a.salt,
        a.password_digest,
        a.full_name,
        str(a.age),
        a.gender,
        str(int(a.role)),
        flatfile.number(a.used_storage_mb),
        str(a.registered_at),
        flatfile.flag(a.active),
        str(a.failed_login_count),
        flatfile.flag(a.locked),
        str(a.last_login_at),
        flatfile.flag(a.mfa_enabled),
    ])


def decode_account(fields: List[str]) -> Account:
    return Account(
        username=fields[0],
        salt=fields[1],
        password_digest=fields[2],
        full_name=fields[3],
        age=int(fields[4]),
        gender=fields[5],
        role=Role(int(fields[6])),
        used_storage_mb=float(fields[7]),
        registered_at=int(fields[8]),
        active=flatfile.parse_flag(fields[9]),
        failed_login_count=int(fields[10]),
        locked=flatfile.parse_flag(fields[11]),
        last_login_at=int(fields[12]),
        mfa_enabled=flatfile.parse_flag(fields[13]),
    )


class UserStore:
    """Username -> Account table, persisted whole to a single file."""

    def __init__(self, path):
        self.path = Path(path)
        self._accounts: Dict[str, Account] = {}

    def exists(self, username: str) -> bool:
        return username in self._accounts

    def find(self, username: str) -> Optional[Account]:
        return self._accounts.get(username)

    def upsert(self, account: Account) -> None:
        self._accounts[account.username] = account

    def discard(self, username: str) -> None:
        self._accounts.pop(username, None)

    def all(self) -> List[Account]:
        return [self._accounts[name] for name in sorted(self._accounts)]

    def __len__(self) -> int:
        return len(self._accounts)

    def persist(self) -> None:
        flatfile.write_rows(self.path, (encode_account(a) for a in self.all()))

    def reload(self) -> None:
        accounts: Dict[str, Account] = {}
        for lineno, fields in flatfile.read_rows(self.path, FIELDS):
            try:
                account = decode_account(fields)
            except ValueError as e:
                raise CorruptRecordError(f"{self.path}:{lineno}: {e}") from e
            accounts[account.username] = account
        self._accounts = accounts
