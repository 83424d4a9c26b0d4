import base64
import hashlib
import hmac
import os
from datetime import UTC, datetime, timedelta

import jwt

from app.core.config import get_settings

PBKDF2_ITERATIONS = 120_000
HASH_SCHEME = "pbkdf2_sha256"
TOKEN_AUDIENCE = "html-blocks-admin"


def _b64(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii")


def _derive(password: str, salt: bytes, iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)


def hash_password(password: str) -> str:
    salt = os.urandom(16)
    return "$".join((HASH_SCHEME, str(PBKDF2_ITERATIONS), _b64(salt), _b64(_derive(password, salt, PBKDF2_ITERATIONS))))


def verify_password(password: str, password_hash: str) -> bool:
    parts = password_hash.split("$", 3)
    if len(parts) != 4 or parts[0] != HASH_SCHEME:
        return False
    _, iterations, salt_b64, digest_b64 = parts
    salt = base64.urlsafe_b64decode(salt_b64.encode("ascii"))
    expected = base64.urlsafe_b64decode(digest_b64.encode("ascii"))
    return hmac.compare_digest(_derive(password, salt, int(iterations)), expected)


def create_access_token(admin_id: str, role: str = "admin", expires_minutes: int | None = None) -> str:
    settings = get_settings()
    issued_at = datetime.now(UTC)
    expires_at = issued_at + timedelta(minutes=expires_minutes or settings.jwt_expire_minutes)
    claims = {
        "sub": admin_id,
        "role": role,
        "aud": TOKEN_AUDIENCE,
        "iat": int(issued_at.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict:
    settings = get_settings()
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm], audience=TOKEN_AUDIENCE)
