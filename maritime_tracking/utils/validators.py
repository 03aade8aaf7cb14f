"""
Input validation for the admin endpoints.
"""

from __future__ import annotations

import re

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MAX_EMAIL_LENGTH = 254


class ValidationError(ValueError):
    """Raised when input validation fails."""


def validate_email(email: str | None) -> str:
    """
    Validate and normalize an email address.

    Returns:
        The trimmed, lowercased email

    Raises:
        ValidationError: If the email is empty or malformed
    """
    if not email or not email.strip():
        raise ValidationError("Email é obrigatório")

    email = email.strip().lower()
    if len(email) > MAX_EMAIL_LENGTH or not EMAIL_PATTERN.match(email):
        raise ValidationError("Formato de email inválido")
    return email


def require_fields(**fields: str | None) -> dict[str, str]:
    """
    Return the fields as non-optional strings.

    Raises:
        ValidationError: Naming every blank field, if any
    """
    present = {name: value for name, value in fields.items() if value is not None and value.strip()}
    missing = [name for name in fields if name not in present]
    if missing:
        raise ValidationError(f"Campos obrigatórios ausentes: {', '.join(missing)}")
    return present
