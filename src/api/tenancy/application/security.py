"""Password hashing for tenant administrators.

Uses bcrypt with automatic salt generation. The engine itself only stores
hashes; these helpers let callers build a provisioning request from a
plaintext password.
"""

import bcrypt

# bcrypt ignores input beyond 72 bytes
BCRYPT_MAX_BYTES = 72


def hash_password(password: str) -> str:
    """Hash a password using bcrypt.

    Args:
        password: The plaintext password

    Returns:
        The bcrypt hash as a string

    Raises:
        ValueError: If the password is empty or longer than bcrypt accepts
    """
    encoded = password.encode()
    if not encoded:
        raise ValueError("Password must not be empty")
    if len(encoded) > BCRYPT_MAX_BYTES:
        raise ValueError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes")
    return bcrypt.hashpw(encoded, bcrypt.gensalt()).decode()


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash using constant-time comparison.

    Returns:
        True if the password matches the hash, False otherwise
    """
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except ValueError:
        # Malformed hash or oversized password
        return False
