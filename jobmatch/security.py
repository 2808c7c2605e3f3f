"""
Password hashing and verification utilities.

Uses passlib's bcrypt for user and admin credentials. Hashes are produced
with 12 rounds; older hashes with fewer rounds still verify and are flagged
by ``needs_rehash`` so login can upgrade them in place.
"""
from __future__ import annotations

from passlib.context import CryptContext

MIN_PASSWORD_LENGTH = 6

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=12)


def hash_password(password: str) -> str:
    """Return a bcrypt hash for the given plain password."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against its hashed form."""
    return pwd_context.verify(plain_password, hashed_password)


def needs_rehash(hashed_password: str) -> bool:
    return pwd_context.needs_update(hashed_password)
