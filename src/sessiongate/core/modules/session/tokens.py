"""Bearer token generation, encoding and decoding.

A token is ``<id>.<secret>``. Both halves are drawn from TOKEN_ALPHABET,
which does not contain the delimiter.
"""

import secrets

from sessiongate.core.modules.session.models import SessionToken
from sessiongate.errors import MalformedTokenError

TOKEN_DELIMITER = "."
# Lowercase letters and digits without l, o, 0, 1
TOKEN_ALPHABET = "abcdefghijkmnpqrstuvwxyz23456789"
MIN_ENTROPY_BYTES = 24
MAX_TOKEN_LENGTH = 256


def generate_secure_random_string(num_bytes: int = MIN_ENTROPY_BYTES) -> str:
    """Generate a human-safe random string, one character per random byte.

    Only the top 5 bits of each byte are used, so 24 bytes give 120 bits of entropy.
    """
    if num_bytes < MIN_ENTROPY_BYTES:
        raise ValueError(f"At least {MIN_ENTROPY_BYTES} random bytes are required, got {num_bytes}")
    return "".join(TOKEN_ALPHABET[byte >> 3] for byte in secrets.token_bytes(num_bytes))


def encode_token(session_id: str, secret: str) -> SessionToken:
    for part in (session_id, secret):
        if not part or TOKEN_DELIMITER in part:
            raise ValueError("Token parts must be non-empty and must not contain the delimiter")
    return SessionToken(f"{session_id}{TOKEN_DELIMITER}{secret}")


def decode_token(token: str) -> tuple[str, str]:
    """Split a token into (id, secret), raising MalformedTokenError on anything ambiguous."""
    if not token or len(token) > MAX_TOKEN_LENGTH:
        raise MalformedTokenError("Token is empty or too long")
    try:
        token.encode("utf-8")
    except UnicodeEncodeError:
        # Lone surrogates cannot be hashed or stored
        raise MalformedTokenError("Token is not valid UTF-8") from None
    parts = token.split(TOKEN_DELIMITER)
    if len(parts) != 2 or not all(parts):
        raise MalformedTokenError("Token must contain exactly one delimiter between two non-empty parts")
    session_id, secret = parts
    return session_id, secret
