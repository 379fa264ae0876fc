"""Contact routes for sending website inquiries to the site owner."""

import json
import logging
from typing import Callable

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from src.shared.contact.notifications import NotificationDispatcher, MailSender
from src.shared.contact.rate_limit import FixedWindowRateLimiter, get_client_key
from src.shared.contact.schemas import ContactSubmission, ContactResponse
from src.shared.contact.ticket import make_ticket, TICKET_PREFIX
from src.shared.contact.validation import (
    ContactValidationError,
    is_honeypot_tripped,
    validate_submission,
)
from src.shared.mail.config import MailConfig, load_mail_config
from src.shared.mail.relay import SmtpRelay
from src.shared.preferences.language import STORAGE_KEY, parse_language

router = APIRouter(prefix="/api/contact", tags=["contact"])

# Shared by every request handled by this process
rate_limiter = FixedWindowRateLimiter()

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def get_rate_limiter() -> FixedWindowRateLimiter:
    return rate_limiter


def get_mail_config() -> MailConfig:
    return load_mail_config()


def get_relay_factory() -> Callable[[MailConfig], MailSender]:
    return SmtpRelay


def _respond(status_code: int, headers: dict = None, **content) -> JSONResponse:
    body = ContactResponse(**content).model_dump(exclude_none=True)
    return JSONResponse(status_code=status_code, content=body, headers=headers)


def parse_contact_body(raw: bytes) -> ContactSubmission:
    """
    Decode a JSON request body into a ContactSubmission.

    An empty body counts as an empty form. A body that decodes to a JSON
    string (posted as text and encoded twice) is decoded once more. Any
    other non-object value (null, a list, a number) carries no fields and
    is treated as an empty form too.

    Raises:
        ValueError if the body is not valid JSON
    """
    if not raw or not raw.strip():
        return ContactSubmission()
    body = json.loads(raw)
    if isinstance(body, str):
        body = json.loads(body)
    if not isinstance(body, dict):
        return ContactSubmission()
    return ContactSubmission.model_validate(body)


@router.api_route("", methods=ALL_METHODS, response_model=ContactResponse)
async def submit_contact_form(
    request: Request,
    limiter: FixedWindowRateLimiter = Depends(get_rate_limiter),
    config: MailConfig = Depends(get_mail_config),
    relay_factory: Callable[[MailConfig], MailSender] = Depends(get_relay_factory),
):
    """
    Accept a contact form submission and email it to the site owner.

    Steps, each of which may end the request early:
    - POST only (405 method_not_allowed)
    - Honeypot filled: pretend success, send nothing
    - In-memory per-IP rate limit: 3 per 60s (429 + Retry-After)
    - Field validation (400 with reason code)
    - Mail relay configuration present (500 server_not_configured)
    - Ticket, admin notice, then acknowledgement (500 send_failed on any failure)
    """
    if request.method != "POST":
        return _respond(status.HTTP_405_METHOD_NOT_ALLOWED, ok=False, error="method_not_allowed")

    try:
        submission = parse_contact_body(await request.body())

        if is_honeypot_tripped(submission):
            logging.info("Contact honeypot tripped, discarding submission")
            return _respond(status.HTTP_200_OK, ok=True)

        client_key = get_client_key(request)
        decision = limiter.check(client_key)
        if not decision.allowed:
            logging.warning(f"Contact rate limit exceeded for {client_key}")
            return _respond(
                status.HTTP_429_TOO_MANY_REQUESTS,
                headers={"Retry-After": str(decision.retry_after_seconds)},
                ok=False,
                error="rate_limited",
            )

        try:
            submission = validate_submission(submission)
        except ContactValidationError as e:
            return _respond(status.HTTP_400_BAD_REQUEST, ok=False, error=e.reason)

        if not config.is_complete:
            logging.error(f"Contact mail relay not configured, missing: {', '.join(config.missing_fields())}")
            return _respond(status.HTTP_500_INTERNAL_SERVER_ERROR, ok=False, error="server_not_configured")

        dispatcher = NotificationDispatcher(relay_factory(config), config)
        language = parse_language(submission.lang or request.cookies.get(STORAGE_KEY))
        ticket = make_ticket(TICKET_PREFIX)

        # Sequential: the acknowledgement only goes out once the owner has the notice
        await run_in_threadpool(dispatcher.send_admin_notice, submission, ticket)
        await run_in_threadpool(dispatcher.send_user_ack, submission, ticket, language)

        logging.info(f"Contact submission {ticket} delivered")
        return _respond(status.HTTP_200_OK, ok=True, ticket=ticket)

    except Exception as e:
        logging.error(f"CONTACT_API_ERROR: {str(e)}", exc_info=True)
        return _respond(status.HTTP_500_INTERNAL_SERVER_ERROR, ok=False, error="send_failed")
