"""Credential material generation."""

import secrets
import string

from src.secret_rotation.config import RotationConfig

_CHARACTER_CLASSES = (
    string.ascii_lowercase,
    string.ascii_uppercase,
    string.digits,
    string.punctuation,
)


def generate_password(config: RotationConfig) -> str:
    """Generate a random password honoring the configured policy.

    Every character class that survives the exclusion list appears at
    least once.
    """
    excluded = set(config.password_exclude_characters)
    classes = [
        "".join(ch for ch in chars if ch not in excluded) for chars in _CHARACTER_CLASSES
    ]
    classes = [chars for chars in classes if chars]
    if config.password_length < len(classes):
        raise ValueError(
            f"password_length must be at least {len(classes)} to include every character class"
        )

    alphabet = "".join(classes)
    while True:
        password = "".join(secrets.choice(alphabet) for _ in range(config.password_length))
        if all(any(ch in chars for ch in password) for chars in classes):
            return password


def generate_key_id() -> str:
    """Generate a public identifier for a new API key."""
    return "AK" + secrets.token_hex(9).upper()


def generate_api_key(config: RotationConfig) -> str:
    """Generate URL-safe API key material."""
    return secrets.token_urlsafe(config.api_key_bytes)
