"""
Typed reads of identifiers from query strings and form fields.

Empty values mean "not given" and come back as None. Anything else that does
not parse raises ValidationFailed naming the field, so a malformed id is a 400
rather than an ORM error.
"""

from typing import Any
from uuid import UUID

from .exceptions import ValidationFailed


def int_param(value: Any, field: str) -> int | None:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationFailed(
            errors=[{"field": field, "message": "Must be an integer"}]
        ) from exc


def uuid_param(value: Any, field: str) -> UUID | None:
    if value in (None, ""):
        return None
    try:
        return UUID(str(value))
    except ValueError as exc:
        raise ValidationFailed(
            errors=[{"field": field, "message": "Must be a valid UUID"}]
        ) from exc
