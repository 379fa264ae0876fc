"""
Validation and sanitization for contact form submissions.
Every rejection carries a machine-readable reason code returned to the client.
"""

import re

from src.shared.contact.schemas import ContactSubmission


MAX_NAME_LENGTH = 80
MAX_COMPANY_LENGTH = 120
MAX_WEBSITE_LENGTH = 200
MAX_PHONE_LENGTH = 80
MAX_MESSAGE_LENGTH = 5000

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_LINE_BREAKS = re.compile(r"[\r\n]+")

MISSING_FIELDS = "missing_fields"
INVALID_EMAIL = "invalid_email"
FIELD_TOO_LONG = "field_too_long"
MESSAGE_TOO_LONG = "message_too_long"


class ContactValidationError(ValueError):
    """Submission rejected; `reason` is the error code sent back with status 400."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email))


def sanitize_header_text(value: str) -> str:
    """Collapse CR/LF runs to a single space so the value is safe inside a mail header."""
    return _LINE_BREAKS.sub(" ", value or "").strip()


def is_honeypot_tripped(submission: ContactSubmission) -> bool:
    """True when the hidden honeypot field was filled in, i.e. a bot posted the form."""
    return submission.hp.strip() != ""


def validate_submission(submission: ContactSubmission) -> ContactSubmission:
    """
    Trim every text field and check presence, email format and lengths.

    Args:
        submission: Parsed form fields

    Returns:
        A trimmed copy of the submission

    Raises:
        ContactValidationError with the first failing rule's reason code
    """
    cleaned = submission.model_copy(update={
        field: getattr(submission, field).strip()
        for field in ("name", "email", "message", "company", "website", "phone")
    })

    if not cleaned.name or not cleaned.email or not cleaned.message:
        raise ContactValidationError(MISSING_FIELDS)

    if not is_valid_email(cleaned.email):
        raise ContactValidationError(INVALID_EMAIL)

    if (len(cleaned.name) > MAX_NAME_LENGTH
            or len(cleaned.company) > MAX_COMPANY_LENGTH
            or len(cleaned.website) > MAX_WEBSITE_LENGTH
            or len(cleaned.phone) > MAX_PHONE_LENGTH):
        raise ContactValidationError(FIELD_TOO_LONG)

    if len(cleaned.message) > MAX_MESSAGE_LENGTH:
        raise ContactValidationError(MESSAGE_TOO_LONG)

    return cleaned
