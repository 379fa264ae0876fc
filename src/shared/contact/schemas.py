"""Pydantic schemas for contact API."""

from pydantic import BaseModel, ConfigDict, field_validator
from typing import Any, Optional


class ContactSubmission(BaseModel):
    """
    Contact form fields as submitted.

    Every field is optional here and coerced to a string; presence, format
    and length rules live in validation.py so each failure maps to its own
    error code instead of a generic 422.
    """
    model_config = ConfigDict(extra="ignore")

    name: str = ""
    email: str = ""
    message: str = ""
    company: str = ""
    website: str = ""
    phone: str = ""
    hp: str = ""  # honeypot, hidden from humans
    lang: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def coerce_to_string(cls, v: Any) -> str:
        """Falsy values become empty strings, anything else its string form."""
        if v is None or v is False or (isinstance(v, (int, float)) and v == 0):
            return ""
        if isinstance(v, bool):
            return "true"
        return str(v)


class ContactResponse(BaseModel):
    """Schema for contact form response."""
    ok: bool
    ticket: Optional[str] = None
    error: Optional[str] = None
