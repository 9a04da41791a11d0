"""
Secret hashing and constant-time comparison for applicant keys and refresh
token secrets. Hashing is one-way; nothing in the service decodes a digest.
"""

import hashlib
import hmac
import secrets


def is_utf8_encodable(value: str) -> bool:
    """False for strings carrying lone surrogates, which cannot be hashed"""
    try:
        value.encode()
    except UnicodeEncodeError:
        return False
    return True


def hash_secret(secret: str) -> str:
    """SHA-256 hex digest of a secret"""
    return hashlib.sha256(secret.encode()).hexdigest()


def constant_time_equals(left: str, right: str) -> bool:
    """
    Compare two digests without leaking how many leading bytes matched.

    Empty values and length mismatches are rejected before any byte
    comparison; equal-length inputs go through hmac.compare_digest.
    """
    if not left or not right:
        return False
    left_bytes = left.encode()
    right_bytes = right.encode()
    if len(left_bytes) != len(right_bytes):
        return False
    return hmac.compare_digest(left_bytes, right_bytes)


def generate_secret(num_bytes: int = 32) -> str:
    """High-entropy URL-safe secret"""
    return secrets.token_urlsafe(num_bytes)
