"""
Withdrawal PIN hashing.

PINs are stored only as bcrypt hashes (the salt is embedded in the hash);
verification re-hashes the candidate and compares, never decrypts.
"""

import re

import bcrypt

from yieldbook.core.exceptions import ValidationFailure

PIN_PATTERN = re.compile(r"[0-9]{4}")
BCRYPT_ROUNDS = 10


def validate_pin_format(pin: str) -> None:
    """Raise :class:`ValidationFailure` unless ``pin`` is exactly four digits."""
    if not isinstance(pin, str) or not PIN_PATTERN.fullmatch(pin):
        raise ValidationFailure("PIN must be exactly 4 digits.")


def hash_pin(pin: str) -> str:
    validate_pin_format(pin)
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(pin.encode("utf-8"), salt).decode("utf-8")


def verify_pin(pin: str, pin_hash: str) -> bool:
    """Return True when ``pin`` matches ``pin_hash``; malformed input never matches."""
    if not pin or not pin_hash:
        return False
    try:
        return bcrypt.checkpw(pin.encode("utf-8"), pin_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash.
        return False
