"""Password hashing and session token helpers."""
import base64
import hashlib
import secrets

import bcrypt


def _prehash(password: str) -> bytes:
    """
    SHA-256 the password before bcrypt.

    bcrypt only looks at the first 72 bytes and rejects NUL bytes, so the raw
    digest is base64-encoded (44 bytes) to keep every password length usable.
    """
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


def hash_password(password: str, rounds: int = 12) -> str:
    """Return a salted bcrypt hash suitable for storage."""
    return bcrypt.hashpw(_prehash(password), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a stored hash. Malformed hashes never match."""
    try:
        return bcrypt.checkpw(_prehash(password), password_hash.encode("utf-8"))
    except ValueError:
        return False


def generate_session_token() -> str:
    """Opaque random token handed to the client in the session cookie."""
    return secrets.token_urlsafe(32)


def hash_session_token(token: str) -> str:
    """Digest used as the server-side key for a session token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
