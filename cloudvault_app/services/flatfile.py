# cloudvault_app/services/flatfile.py
# -*- coding: utf-8 -*-
"""Line-oriented record files: field encoding and all-or-nothing rewrites."""
from __future__ import annotations
import os
import tempfile
from pathlib import Path
from typing import Iterable, Iterator

from ..errors import CorruptRecordError, StorageError

DELIMITER = "|"
FORBIDDEN = (DELIMITER, "\n", "\r")


def is_storable(value: str) -> bool:
    return not any(ch in value for ch in FORBIDDEN)


def flag(value: bool) -> str:
    return "1" if value else "0"


def parse_flag(token: str) -> bool:
    return token == "1"


def number(value: float) -> str:
    # repr keeps the shortest text that reads back to the same float
    return repr(float(value))


def join(fields: Iterable[str]) -> str:
    return DELIMITER.join(fields)


def read_rows(path: Path, width: int) -> Iterator[tuple[int, list[str]]]:
    """Yields (line number, fields). A missing file yields nothing."""
    try:
        fh = open(path, "r", encoding="utf-8", newline="\n")
    except FileNotFoundError:
        return
    except OSError as e:
        raise StorageError(f"Cannot read {path}: {e}") from e
    with fh:
        try:
            for lineno, line in enumerate(fh, start=1):
                line = line.rstrip("\n")
                if not line:
                    continue
                fields = line.split(DELIMITER)
                if len(fields) != width:
                    raise CorruptRecordError(
                        f"{path}:{lineno}: expected {width} fields, found {len(fields)}"
                    )
                yield lineno, fields
        except UnicodeDecodeError as e:
            raise CorruptRecordError(f"{path}: {e}") from e
        except CorruptRecordError:
            raise
        except OSError as e:
            raise StorageError(f"Cannot read {path}: {e}") from e


def write_rows(path: Path, rows: Iterable[str]) -> None:
    """Replaces ``path`` with ``rows`` or leaves the previous file untouched."""
    path = Path(path)
    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as fh:
            for row in rows:
                fh.write(row)
                fh.write("\n")
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, path)
        tmp_name = None
    except OSError as e:
        raise StorageError(f"Cannot write {path}: {e}") from e
    finally:
        if tmp_name is not None:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
