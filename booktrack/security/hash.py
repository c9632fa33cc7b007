from __future__ import annotations

import bcrypt

BCRYPT_ROUNDS = 10
# bcrypt only looks at the first 72 bytes of a secret
_MAX_SECRET_BYTES = 72


def _secret(password: str) -> bytes:
    return password.encode("utf-8")[:_MAX_SECRET_BYTES]


def hash_password(password: str) -> str:
    """Return a salted bcrypt hash for storage."""
    return bcrypt.hashpw(_secret(password), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_secret(password), password_hash.encode("utf-8"))
    except ValueError:
        return False
