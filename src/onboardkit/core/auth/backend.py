"""Credential utilities."""

import secrets

from onboardkit.core.constants import TEMP_PASSWORD_ALPHABET, TEMP_PASSWORD_LENGTH


def generate_temporary_password(length: int = TEMP_PASSWORD_LENGTH) -> str:
    """Generate a random temporary password for a tenant owner.

    Uses the ``secrets`` module, so the result is suitable for credentials.

    Args:
        length: Number of characters (default 12)

    Returns:
        Password drawn from letters, digits and ``!@#$%^&*``
    """
    return "".join(secrets.choice(TEMP_PASSWORD_ALPHABET) for _ in range(length))
