# cloudvault_app/services/credentials.py
# -*- coding: utf-8 -*-
"""
Salted password digests.

The salt is a bcrypt salt (16 random bytes plus the cost factor) and the
digest is the bcrypt hash of the password under that salt, so the same
(salt, password) pair always yields the same digest. Passwords are first
reduced with SHA-256 because bcrypt only reads 72 bytes of input.
"""
from __future__ import annotations
import base64
import hashlib
import hmac

import bcrypt

DEFAULT_ROUNDS = 12


class CredentialCodec:
    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        self.rounds = rounds

    def derive_salt(self) -> str:
        return bcrypt.gensalt(rounds=self.rounds).decode("ascii")

    def digest(self, salt: str, password: str) -> str:
        return bcrypt.hashpw(_prehash(password), salt.encode("ascii")).decode("ascii")

    def verify(self, salt: str, password: str, expected: str) -> bool:
        return hmac.compare_digest(self.digest(salt, password), expected)


def _prehash(password: str) -> bytes:
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())
