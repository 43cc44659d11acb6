# cloudvault_app/services/file_store.py
# -*- coding: utf-8 -*-
from __future__ import annotations
from pathlib import Path
from typing import Dict, List

from ..errors import CorruptRecordError
from ..models import FileRecord, FileType, Region
from . import flatfile

# id|name|owner|region|type|uploaded|size MB|description|public|encrypted
FIELDS = 10


def encode_record(r: FileRecord) -> str:
    return flatfile.join([
        r.id,
        r.name,
        r.owner,
        str(int(r.region)),
        str(int(r.type)),
        r.uploaded_at,
        flatfile.number(r.size_mb),
        r.description,
        flatfile.flag(r.is_public),
        flatfile.flag(r.encrypted_at_rest),
    ])


def decode_record(fields: List[str]) -> FileRecord:
    return FileRecord(
        id=fields[0],
        name=fields[1],
        owner=fields[2],
        region=Region(int(fields[3])),
        type=FileType(int(fields[4])),
        uploaded_at=fields[5],
        size_mb=float(fields[6]),
        description=fields[7],
        is_public=flatfile.parse_flag(fields[8]),
        encrypted_at_rest=flatfile.parse_flag(fields[9]),
    )


class FileStore:
    """Per-user ordered file lists, one backing file per username."""

    def __init__(self, data_dir):
        self.data_dir = Path(data_dir)
        self._lists: Dict[str, List[FileRecord]] = {}

    def path_for(self, username: str) -> Path:
        return self.data_dir / f"{username}.dat"

    def list_for(self, username: str) -> List[FileRecord]:
        return list(self._lists.get(username, ()))

    def append_for(self, username: str, record: FileRecord) -> None:
        self._lists.setdefault(username, []).append(record)

    def remove_for(self, username: str, index: int) -> FileRecord:
        records = self._lists.get(username, [])
        if not 0 <= index < len(records):
            raise IndexError(f"file index {index} out of range for {username!r} ({len(records)} files)")
        return records.pop(index)

    def reset_for(self, username: str, records) -> None:
        """Replaces the in-memory list without touching the disk."""
        self._lists[username] = list(records)

    def loaded_users(self) -> List[str]:
        return sorted(self._lists)

    def persist_for(self, username: str) -> None:
        flatfile.write_rows(
            self.path_for(username),
            (encode_record(r) for r in self._lists.get(username, ())),
        )

    def reload_for(self, username: str) -> None:
        path = self.path_for(username)
        records: List[FileRecord] = []
        for lineno, fields in flatfile.read_rows(path, FIELDS):
            try:
                records.append(decode_record(fields))
            except ValueError as e:
                raise CorruptRecordError(f"{path}:{lineno}: {e}") from e
        self._lists[username] = records

    def ensure_loaded(self, username: str) -> None:
        if username not in self._lists:
            self.reload_for(username)
