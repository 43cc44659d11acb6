# cloudvault_app/models/session.py
# -*- coding: utf-8 -*-
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Session:
    """An authenticated context. ``Session()`` is the empty session."""

    username: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.username is not None


@dataclass(frozen=True)
class MfaChallenge:
    """Password accepted; waiting for the one-time code.

    ``token`` identifies this challenge. Only a caller holding it can submit
    the code.
    """

    username: str
    token: str
