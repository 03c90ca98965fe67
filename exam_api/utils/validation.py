"""Validation of ids taken from request paths."""
import re

from fastapi import HTTPException

# Generated ids are hex; older documents used numeric ids
_ID_PATTERN = re.compile(r"[A-Za-z0-9_-]{1,64}")


def validate_id(name: str, value: str) -> str:
    """Return the stripped id, or raise 400 for empty or unsafe values."""
    cleaned = value.strip() if isinstance(value, str) else ""
    if not cleaned:
        raise HTTPException(status_code=400, detail=f"{name} is required")
    if not _ID_PATTERN.fullmatch(cleaned):
        raise HTTPException(status_code=400, detail=f"Invalid {name}")
    return cleaned
