"""Reusable pydantic validators for partial-update schemas."""
from pydantic import field_validator


def not_nullable(*fields: str):
    """Reject an explicit null for columns that cannot be cleared.

    Omitting the field is still allowed; defaults are not validated.
    """
    def check(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value

    return field_validator(*fields)(check)
