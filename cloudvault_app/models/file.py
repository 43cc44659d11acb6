# cloudvault_app/models/file.py
# -*- coding: utf-8 -*-
from __future__ import annotations
import os
import secrets
from dataclasses import dataclass
from enum import IntEnum


class Region(IntEnum):
    ASIA = 0
    EUROPE = 1
    AMERICA = 2
    GLOBAL = 3

    @property
    def label(self) -> str:
        return REGION_LABELS[self]

    @classmethod
    def parse(cls, value) -> "Region":
        """Accepts an ordinal, a member name or a label; anything else is GLOBAL."""
        if isinstance(value, Region):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(value) if value in cls._value2member_map_ else cls.GLOBAL
        text = str(value or "").strip().upper()
        if text.isdigit():
            return cls.parse(int(text))
        return cls.__members__.get(text, cls.GLOBAL)


class FileType(IntEnum):
    DOCUMENT = 0
    IMAGE = 1
    VIDEO = 2
    AUDIO = 3
    OTHER = 4

    @property
    def label(self) -> str:
        return FILE_TYPE_LABELS[self]


REGION_LABELS = {
    Region.ASIA: "Asia",
    Region.EUROPE: "Europe",
    Region.AMERICA: "America",
    Region.GLOBAL: "Global",
}

FILE_TYPE_LABELS = {
    FileType.DOCUMENT: "Document",
    FileType.IMAGE: "Image",
    FileType.VIDEO: "Video",
    FileType.AUDIO: "Audio",
    FileType.OTHER: "Other",
}

EXTENSIONS = {
    FileType.DOCUMENT: {"txt", "pdf", "doc", "docx", "xlsx", "pptx"},
    FileType.IMAGE: {"jpg", "jpeg", "png", "gif", "bmp"},
    FileType.VIDEO: {"mp4", "avi", "mov", "wmv", "mkv"},
    FileType.AUDIO: {"mp3", "wav", "flac", "aac"},
}


def detect_file_type(filename: str) -> FileType:
    ext = os.path.splitext(filename)[1].lstrip(".").lower()
    for ftype, exts in EXTENSIONS.items():
        if ext in exts:
            return ftype
    return FileType.OTHER


def new_file_id() -> str:
    return "file_" + secrets.token_hex(16)


@dataclass(frozen=True)
class FileRecord:
    id: str
    name: str
    owner: str
    region: Region
    type: FileType
    uploaded_at: str                # "YYYY-MM-DD HH:MM:SS"
    size_mb: float
    description: str = ""
    is_public: bool = False
    encrypted_at_rest: bool = False  # flag only

    def matches(self, term: str) -> bool:
        term = term.lower()
        return term in self.name.lower() or term in self.description.lower()
