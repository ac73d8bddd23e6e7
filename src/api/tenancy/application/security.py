"""Security utilities for tenant administrator accounts.

Provides temporary password generation and hashing for the administrator
account seeded into every new tenant database. Uses cryptographically
secure random generation and bcrypt for hashing.
"""

import secrets

import bcrypt

MIN_TEMPORARY_PASSWORD_LENGTH = 8
DEFAULT_TEMPORARY_PASSWORD_LENGTH = 12

# Visually ambiguous characters (I/l) are left out
UPPERCASE = "ABCDEFGHJKLMNOPQRSTUVWXYZ"
LOWERCASE = "abcdefghijkmnopqrstuvwxyz"
DIGITS = "0123456789"
SYMBOLS = "!@#$%^&*?_-"

_CHARACTER_CLASSES = (UPPERCASE, LOWERCASE, DIGITS, SYMBOLS)
_ALL_CHARACTERS = "".join(_CHARACTER_CLASSES)


def generate_temporary_password(length: int = DEFAULT_TEMPORARY_PASSWORD_LENGTH) -> str:
    """Generate a random temporary password.

    The password holds at least one uppercase letter, one lowercase letter,
    one digit and one symbol. The remaining characters are drawn from all
    classes and the result is shuffled so the guaranteed characters do not
    sit at predictable positions.

    Args:
        length: Desired length; values below 8 are raised to 8

    Returns:
        The plaintext password
    """
    length = max(length, MIN_TEMPORARY_PASSWORD_LENGTH)

    characters = [secrets.choice(char_class) for char_class in _CHARACTER_CLASSES]
    characters.extend(
        secrets.choice(_ALL_CHARACTERS) for _ in range(length - len(characters))
    )

    # Fisher-Yates with a CSPRNG
    for i in range(len(characters) - 1, 0, -1):
        j = secrets.randbelow(i + 1)
        characters[i], characters[j] = characters[j], characters[i]

    return "".join(characters)


def hash_password(password: str) -> str:
    """Hash a password using bcrypt.

    Args:
        password: The plaintext password to hash

    Returns:
        The bcrypt hash as a string
    """
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash using constant-time comparison.

    Args:
        password: The plaintext password to verify
        password_hash: The bcrypt hash to verify against

    Returns:
        True if the password matches the hash, False otherwise
    """
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except ValueError:
        # Malformed hash
        return False
