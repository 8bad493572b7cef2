"""Secret hashing and constant-time comparison."""

import hashlib

SECRET_HASH_LENGTH = 32  # SHA-256 digest size


def hash_secret(secret: str | bytes) -> bytes:
    """Return the SHA-256 digest of a session secret.

    Strings are UTF-8 encoded first. Any input, including empty, yields 32 bytes.
    """
    if isinstance(secret, str):
        secret = secret.encode("utf-8")
    return hashlib.sha256(secret).digest()


def constant_time_equal(a: bytes, b: bytes) -> bool:
    """Compare two byte strings without exiting on the first differing byte.

    Only a length mismatch returns early; length is not secret.
    """
    if len(a) != len(b):
        return False
    diff = 0
    for x, y in zip(a, b, strict=True):
        diff |= x ^ y
    return diff == 0
