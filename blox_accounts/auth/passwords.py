"""Password hashing."""

import hashlib
import secrets
import string

ALPHABET = string.ascii_letters + string.digits


def hash_password(password: str) -> str:
    """
    Generate the credential hash of a password.

    The hash is deterministic (hex SHA-512) so that password changes can be
    made conditional on the stored hash in a single update.
    """
    return hashlib.sha512(password.encode('utf-8')).hexdigest()


def check_password(password: str, encrypted: str) -> bool:
    """Check a password against a credential hash."""
    return secrets.compare_digest(hash_password(password), encrypted)


def generate_password(length: int = 8) -> str:
    """Generate a random alphanumeric password."""
    return ''.join(secrets.choice(ALPHABET) for _ in range(length))
