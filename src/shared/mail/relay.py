"""SMTP relay used for every outbound message."""

import smtplib
import ssl
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from email.header import Header
from email.mime.text import MIMEText
from email.utils import formataddr, make_msgid
from typing import Iterator, Optional, Tuple

from src.shared.mail.config import MailConfig


@dataclass(frozen=True)
class MailMessage:
    """A plain-text outbound message."""
    from_addr: Tuple[str, str]  # (display name, address)
    to_addr: str
    reply_to: str
    subject: str
    body: str


class MailRelayError(Exception):
    """Failure talking to the SMTP relay. Carries whatever detail the server returned."""

    def __init__(self, message: str, code: Optional[int] = None,
                 response: Optional[str] = None, command: Optional[str] = None):
        super().__init__(message)
        self.code = code
        self.response = response
        self.command = command

    def to_dict(self) -> dict:
        detail = {"error": str(self)}
        if self.code is not None:
            detail["code"] = self.code
        if self.response is not None:
            detail["response"] = self.response
        if self.command is not None:
            detail["command"] = self.command
        return detail


def _relay_error(exc: Exception, command: str) -> MailRelayError:
    if isinstance(exc, smtplib.SMTPResponseException):
        response = exc.smtp_error
        if isinstance(response, bytes):
            response = response.decode("utf-8", errors="replace")
        return MailRelayError(str(exc), code=exc.smtp_code, response=response, command=command)
    if isinstance(exc, smtplib.SMTPRecipientsRefused):
        return MailRelayError(f"Recipients refused: {', '.join(exc.recipients)}", command=command)
    return MailRelayError(str(exc) or exc.__class__.__name__, command=command)


def build_mime(message: MailMessage, domain: Optional[str] = None) -> MIMEText:
    """Turn a MailMessage into a UTF-8 text/plain MIME message with a fresh Message-ID."""
    mime = MIMEText(message.body, "plain", "utf-8")
    display_name, address = message.from_addr
    mime["From"] = formataddr((display_name, address), charset="utf-8")
    mime["To"] = message.to_addr
    mime["Reply-To"] = message.reply_to
    mime["Subject"] = Header(message.subject, "utf-8")
    mime["Message-ID"] = make_msgid(domain=domain)
    return mime


class SmtpRelay:
    """
    Sends messages through the SMTP server described by a MailConfig.

    Implicit TLS (SMTP_SSL) when config.secure is set, otherwise a plain
    connection upgraded with STARTTLS when the server offers it. Every
    connection is bounded by config.timeout.
    """

    def __init__(self, config: MailConfig):
        self.config = config

    @contextmanager
    def _connect(self) -> Iterator[smtplib.SMTP]:
        cfg = self.config
        try:
            if cfg.secure:
                server = smtplib.SMTP_SSL(cfg.host, cfg.port, timeout=cfg.timeout,
                                          context=ssl.create_default_context())
            else:
                server = smtplib.SMTP(cfg.host, cfg.port, timeout=cfg.timeout)
                server.ehlo()
                if server.has_extn("starttls"):
                    server.starttls(context=ssl.create_default_context())
                    server.ehlo()
        except (smtplib.SMTPException, OSError) as e:
            raise _relay_error(e, "CONN") from e

        try:
            try:
                server.login(cfg.user, cfg.password)
            except (smtplib.SMTPException, OSError) as e:
                raise _relay_error(e, "AUTH") from e
            yield server
        finally:
            try:
                server.quit()
            except (smtplib.SMTPException, OSError):
                server.close()

    def verify(self) -> None:
        """Connect and authenticate without sending anything."""
        with self._connect():
            logging.info(f"SMTP relay {self.config.host}:{self.config.port} verified")

    def send(self, message: MailMessage) -> str:
        """Send one message and return its Message-ID."""
        domain = message.from_addr[1].rpartition("@")[2] or None
        mime = build_mime(message, domain=domain)
        with self._connect() as server:
            try:
                server.send_message(mime, from_addr=message.from_addr[1], to_addrs=[message.to_addr])
            except (smtplib.SMTPException, OSError) as e:
                raise _relay_error(e, "DATA") from e
        logging.info(f"Mail sent to {message.to_addr} ({mime['Message-ID']})")
        return mime["Message-ID"]
