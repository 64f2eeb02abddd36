"""
Digest helpers for the md_api login handshake.

The server stores ``sha256(sha256(USERNAME) + password)`` for every account
and expects login proofs built from that value, so the encoding here has to
match it bit for bit: UTF-8 input, lowercase hexadecimal output.
"""

import hashlib


def digest(*values: str) -> str:
    """
    Hash the concatenation of the given values.

    Args:
        *values: One or more strings, concatenated in order without a separator

    Returns:
        str: Lowercase hexadecimal SHA-256 digest

    Example:
        ```python
        salt = digest("ALICE")
        password_hash = digest(salt, "secret")
        ```
    """
    if not values:
        raise ValueError("digest() needs at least one value")
    return hashlib.sha256("".join(values).encode("utf-8")).hexdigest()


# Older callers use the algorithm's name.
sha256 = digest


def password_hash(username: str, password: str) -> str:
    """Derive the stored password hash, salted with the uppercased username."""
    return digest(digest(username.upper()), password)


def login_proof(password_hash: str, challenge_token: str) -> str:
    """Bind a password hash to a single-use challenge token."""
    return digest(password_hash, challenge_token)
