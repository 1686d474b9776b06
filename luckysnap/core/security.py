from __future__ import annotations

import hashlib
import secrets


def hash_password(password: str, salt: bytes) -> str:
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, 120_000)
    return digest.hex()


def verify_password(password: str, salt_hex: str, expected_hash: str) -> bool:
    password_hash = hash_password(password, bytes.fromhex(salt_hex))
    return secrets.compare_digest(expected_hash, password_hash)


def new_session_token() -> str:
    return secrets.token_urlsafe(32)


def tokens_match(provided: str, expected: str) -> bool:
    if not provided or not expected:
        return False
    return secrets.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))
