# payroll/core/security_password.py
from __future__ import annotations

from passlib.context import CryptContext

from payroll.core.config import settings

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)

# Refresh tokens are longer than bcrypt's 72-byte input limit, so they are
# pre-hashed with SHA-256 before bcrypt.
rt_context = CryptContext(
    schemes=["bcrypt_sha256"],
    deprecated="auto",
    bcrypt_sha256__rounds=settings.BCRYPT_ROUNDS,
)


def hash_password(plain: str) -> str:
    return pwd_context.hash(plain)


def verify_password(plain: str, stored_hash: str | None) -> bool:
    if not plain or not stored_hash:
        return False
    try:
        return pwd_context.verify(plain, stored_hash)
    except ValueError:
        # unrecognized or corrupt hash
        return False


def hash_refresh_token(token: str) -> str:
    return rt_context.hash(token)


def verify_refresh_token(token: str, stored_hash: str | None) -> bool:
    if not token or not stored_hash:
        return False
    try:
        return rt_context.verify(token, stored_hash)
    except ValueError:
        return False
