"""Admin notification and submitter acknowledgement emails for contact submissions."""

import logging
from typing import List, Protocol

from src.shared.contact.schemas import ContactSubmission
from src.shared.contact.validation import sanitize_header_text
from src.shared.mail.config import MailConfig
from src.shared.mail.relay import MailMessage
from src.shared.preferences.language import Language, DEFAULT_LANGUAGE


SUMMARY_LIMIT = 220
SITE_NAME = "GEONIX"
ADMIN_SENDER_NAME = "Website Contact"


class MailSender(Protocol):
    def send(self, message: MailMessage) -> str: ...


class MailDispatchError(Exception):
    """An outbound contact email could not be handed to the relay."""


def summarize_message(message: str, limit: int = SUMMARY_LIMIT) -> str:
    """First `limit` characters of the message, with "..." when it was cut."""
    return f"{message[:limit]}..." if len(message) > limit else message


def build_admin_notice(submission: ContactSubmission, ticket: str, config: MailConfig) -> MailMessage:
    """Message to the site owner. The ticket is the first line of the body."""
    safe_name = sanitize_header_text(submission.name)
    safe_email = sanitize_header_text(submission.email)

    lines = [
        f"[접수번호] {ticket}",
        "",
        f"Name: {submission.name}",
        f"Email: {submission.email}",
    ]
    if submission.company:
        lines.append(f"Company: {submission.company}")
    if submission.phone:
        lines.append(f"Phone: {submission.phone}")
    if submission.website:
        lines.append(f"Website: {submission.website}")
    lines += ["", "Message:", submission.message]

    return MailMessage(
        from_addr=(ADMIN_SENDER_NAME, config.user),
        to_addr=config.to,
        reply_to=safe_email,
        subject=f"[{SITE_NAME} 웹문의] {safe_name} ({safe_email})",
        body="\n".join(lines),
    )


def _ack_block_ko(name: str, ticket: str, company: str, phone: str, summary: str) -> List[str]:
    return [
        f"안녕하세요 {name}님,",
        "문의가 정상적으로 접수되었습니다.",
        "",
        f"- 접수번호: {ticket}",
        f"- Company: {company}",
        f"- Phone: {phone}",
        f"- 접수내용(요약): {summary}",
        "",
        "담당자가 확인 후 회신드리겠습니다. 감사합니다.",
    ]


def _ack_block_en(name: str, ticket: str, company: str, phone: str, summary: str) -> List[str]:
    return [
        f"Hello {name},",
        "We’ve received your inquiry successfully.",
        "",
        f"- Ticket: {ticket}",
        f"- Company: {company}",
        f"- Phone: {phone}",
        f"- Message (summary): {summary}",
        "",
        "Our team will get back to you as soon as possible. Thank you.",
    ]


def build_user_ack(submission: ContactSubmission, ticket: str, config: MailConfig,
                   language: Language = DEFAULT_LANGUAGE) -> MailMessage:
    """
    Acknowledgement to the submitter, in both languages with the preferred one first.

    Only a summary of the message is echoed back so a mistyped address
    does not leak the full inquiry.
    """
    fields = (
        submission.name,
        ticket,
        submission.company or "-",
        submission.phone or "-",
        summarize_message(submission.message),
    )
    blocks = [_ack_block_ko(*fields), _ack_block_en(*fields)]
    if language == Language.EN:
        blocks.reverse()

    body = blocks[0] + ["", "------------------------------", ""] + blocks[1]
    return MailMessage(
        from_addr=(SITE_NAME, config.user),
        to_addr=sanitize_header_text(submission.email),
        reply_to=config.to,
        subject=f"문의가 접수되었습니다 / We’ve received your inquiry (Ticket: {ticket})",
        body="\n".join(body),
    )


class NotificationDispatcher:
    """Sends the two contact emails through a relay, one after the other."""

    def __init__(self, relay: MailSender, config: MailConfig):
        self.relay = relay
        self.config = config

    def _send(self, message: MailMessage, kind: str) -> str:
        try:
            return self.relay.send(message)
        except Exception as e:
            logging.error(f"Failed to send contact {kind} to {message.to_addr}: {str(e)}")
            raise MailDispatchError(f"{kind} send failed: {str(e)}") from e

    def send_admin_notice(self, submission: ContactSubmission, ticket: str) -> str:
        return self._send(build_admin_notice(submission, ticket, self.config), "admin notice")

    def send_user_ack(self, submission: ContactSubmission, ticket: str,
                      language: Language = DEFAULT_LANGUAGE) -> str:
        return self._send(build_user_ack(submission, ticket, self.config, language), "acknowledgement")
