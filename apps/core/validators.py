"""Input sanitizing helpers shared by the identity and task services."""
import re
from typing import Any, Iterable, List, Optional
from uuid import UUID

from .errors import ValidationFailed

# 8+ characters with at least one lowercase, uppercase, digit and special character
PASSWORD_PATTERN = re.compile(
    r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>/?]).{8,}$"
)

HEX_COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")


def clean_str(value: Any) -> Optional[str]:
    """Trim a string input; non-strings and blanks become None."""
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def normalize_email(email: Any) -> Optional[str]:
    email = clean_str(email)
    return email.lower() if email else None


def parse_id(value: Any, field: str) -> UUID:
    """Parse an identifier or fail with 'Missing or invalid <field>'."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(clean_str(value) or "")
    except (TypeError, ValueError):
        raise ValidationFailed(f"Missing or invalid {field}")


def missing_fields(data: dict, required: Iterable[str]) -> List[str]:
    """Names of required fields that are absent, None or an empty string."""
    return [
        field for field in required
        if data.get(field) is None or data.get(field) == ""
    ]


def is_strong_password(password: str) -> bool:
    return bool(password and PASSWORD_PATTERN.match(password))
