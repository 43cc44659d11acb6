# cloudvault_app/services/repositories.py
# -*- coding: utf-8 -*-
"""
Storage contracts the account engine depends on.

The flat-file stores in this package implement them; another backend (a
key-value store, a relational table) only has to honour the same methods.
"""
from __future__ import annotations
from typing import Iterable, List, Optional, Protocol

from ..models import Account, FileRecord


class UserRepository(Protocol):
    def exists(self, username: str) -> bool: ...
    def find(self, username: str) -> Optional[Account]: ...
    def upsert(self, account: Account) -> None: ...
    def discard(self, username: str) -> None: ...
    def all(self) -> Iterable[Account]: ...
    def persist(self) -> None: ...
    def reload(self) -> None: ...


class FileRepository(Protocol):
    def list_for(self, username: str) -> List[FileRecord]: ...
    def append_for(self, username: str, record: FileRecord) -> None: ...
    def remove_for(self, username: str, index: int) -> FileRecord: ...
    def reset_for(self, username: str, records: Iterable[FileRecord]) -> None: ...
    def persist_for(self, username: str) -> None: ...
    def reload_for(self, username: str) -> None: ...
    def ensure_loaded(self, username: str) -> None: ...
