"""
Identifier generation helper for the application.

Provides consistent id generation across all models.
"""
import re
import secrets

_OBJECT_ID_RE = re.compile(r"^[0-9a-f]{24}$")


def generate_object_id() -> str:
    """
    Generate a new document id.

    Returns:
        str: 24 lowercase hex characters
    """
    return secrets.token_hex(12)


def is_object_id(value: str) -> bool:
    """Check whether a string has the shape of a generated document id"""
    return bool(value) and bool(_OBJECT_ID_RE.match(value.lower()))
