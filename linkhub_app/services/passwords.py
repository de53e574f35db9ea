"""
Password hashing.

Stored hashes are unsalted SHA-256 hex digests, the format every
existing user:<username> hash already holds, so login keeps working
against data written by earlier deployments.
"""

import hashlib
import hmac


def hash_password(password: str) -> str:
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def verify_password(password: str, stored_hash: str) -> bool:
    """Constant-time comparison of a candidate password against a stored hash"""
    if not isinstance(stored_hash, str):
        return False
    return hmac.compare_digest(hash_password(password), stored_hash)
