"""Identifier and token generation.

Ids are collision-resistant strings produced without a central counter,
so rows can be created on several nodes and merged later without
leaking row counts.
"""

import hashlib
import secrets
import string
import time

ID_LENGTH = 25

# Lowercase letters and digits (36 possible characters)
_ALPHABET = string.digits + string.ascii_lowercase


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_ALPHABET[rem])
    return "".join(reversed(digits))


def generate_id() -> str:
    """Generate a 25-character, lowercase alphanumeric id.

    Layout is ``c`` + 8 chars of base-36 milliseconds + 16 random chars.

    Example:
        generate_id() -> "clz3k9x7q2w5a4b7c9d2e1f0g"
    """
    timestamp = _to_base36(int(time.time() * 1000)).rjust(8, "0")[-8:]
    random_part = "".join(
        secrets.choice(_ALPHABET) for _ in range(ID_LENGTH - 1 - len(timestamp))
    )
    return f"c{timestamp}{random_part}"


def generate_token() -> str:
    """Generate a 64-character hex token for sessions and access tokens."""
    return secrets.token_hex(32)


def hash_token(token: str, secret: str | None) -> str:
    """Hash a verification token with the adapter secret.

    Without a secret the token is stored verbatim.
    """
    if secret is None:
        return token
    return hashlib.sha256(f"{token}{secret}".encode()).hexdigest()


def compound_id(provider_id: str, provider_account_id: str) -> str:
    """SHA-256 of the provider identity, used by the legacy account schema."""
    return hashlib.sha256(f"{provider_id}:{provider_account_id}".encode()).hexdigest()
