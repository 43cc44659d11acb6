# cloudvault_app/services/formatting.py
# -*- coding: utf-8 -*-
"""Display helpers for sizes and timestamps (presentation only)."""
from __future__ import annotations
from datetime import datetime


def human_size(size_mb: float) -> str:
    size_mb = float(size_mb or 0)
    if size_mb < 1.0:
        kb = size_mb * 1024.0
        return f"{kb:.0f} KB" if abs(kb - round(kb)) < 1e-6 else f"{kb:.1f} KB"
    if size_mb < 1024.0:
        return f"{size_mb:.0f} MB" if abs(size_mb - round(size_mb)) < 1e-6 else f"{size_mb:.1f} MB"
    gb = size_mb / 1024.0
    return f"{gb:.1f} GB" if abs(gb * 10 - round(gb * 10)) < 1e-6 else f"{gb:.2f} GB"


def timestamp_text(epoch: int, fmt: str = "%Y-%m-%d %H:%M:%S") -> str | None:
    if not epoch:
        return None
    return datetime.fromtimestamp(int(epoch)).strftime(fmt)
