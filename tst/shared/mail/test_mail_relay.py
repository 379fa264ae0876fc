"""
Tests for the SMTP relay with smtplib replaced by a recording stand-in.
"""

import smtplib
from dataclasses import replace
from email.header import decode_header, make_header

import pytest

from src.shared.mail import relay as relay_module
from src.shared.mail.relay import MailMessage, MailRelayError, SmtpRelay, build_mime


class RecordingSMTP:
    instances = []

    def __init__(self, host, port, timeout=None, context=None, login_error=None):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.login_error = login_error
        self.calls = []
        self.sent = []
        RecordingSMTP.instances.append(self)

    def ehlo(self):
        self.calls.append("ehlo")

    def has_extn(self, name):
        return name == "starttls"

    def starttls(self, context=None):
        self.calls.append("starttls")

    def login(self, user, password):
        self.calls.append(("login", user))
        if self.login_error:
            raise self.login_error

    def send_message(self, msg, from_addr=None, to_addrs=None):
        self.sent.append((msg, from_addr, to_addrs))

    def quit(self):
        self.calls.append("quit")

    def close(self):
        self.calls.append("close")


@pytest.fixture(autouse=True)
def fake_smtplib(monkeypatch):
    RecordingSMTP.instances = []
    monkeypatch.setattr(relay_module.smtplib, "SMTP_SSL", RecordingSMTP)
    monkeypatch.setattr(relay_module.smtplib, "SMTP", RecordingSMTP)


@pytest.fixture
def message():
    return MailMessage(
        from_addr=("GEONIX", "noreply@geonix.example"),
        to_addr="minsu@example.com",
        reply_to="owner@geonix.example",
        subject="문의가 접수되었습니다 (Ticket: GEONIX-20260210-7F3KQ9)",
        body="안녕하세요",
    )


def test_send_over_implicit_tls(mail_config, message):
    message_id = SmtpRelay(mail_config).send(message)

    server = RecordingSMTP.instances[0]
    assert (server.host, server.port, server.timeout) == ("smtp.example.com", 465, 10.0)
    assert "starttls" not in server.calls
    assert server.calls[-1] == "quit"
    mime, from_addr, to_addrs = server.sent[0]
    assert from_addr == "noreply@geonix.example"
    assert to_addrs == ["minsu@example.com"]
    assert mime["Message-ID"] == message_id
    assert mime["Reply-To"] == "owner@geonix.example"


def test_plain_connection_upgrades_with_starttls(mail_config, message):
    SmtpRelay(replace(mail_config, secure=False, port=587)).send(message)

    assert RecordingSMTP.instances[0].calls[:3] == ["ehlo", "starttls", "ehlo"]


def test_auth_failure_carries_server_detail(monkeypatch, mail_config, message):
    error = smtplib.SMTPAuthenticationError(535, b"5.7.8 Bad credentials")
    monkeypatch.setattr(
        relay_module.smtplib, "SMTP_SSL",
        lambda *args, **kwargs: RecordingSMTP(*args, login_error=error, **kwargs),
    )

    with pytest.raises(MailRelayError) as exc_info:
        SmtpRelay(mail_config).verify()

    assert exc_info.value.to_dict() == {
        "error": str(error),
        "code": 535,
        "response": "5.7.8 Bad credentials",
        "command": "AUTH",
    }
    assert RecordingSMTP.instances[0].calls[-1] == "quit"


def test_connection_failure(monkeypatch, mail_config, message):
    def refuse(*args, **kwargs):
        raise ConnectionRefusedError("Connection refused")
    monkeypatch.setattr(relay_module.smtplib, "SMTP_SSL", refuse)

    with pytest.raises(MailRelayError) as exc_info:
        SmtpRelay(mail_config).send(message)

    assert exc_info.value.command == "CONN"
    assert exc_info.value.code is None


def test_mime_headers_are_utf8_encoded(message):
    mime = build_mime(message, domain="geonix.example")

    assert str(make_header(decode_header(mime["Subject"]))) == message.subject
    assert mime["Message-ID"].endswith("@geonix.example>")
    assert mime.get_content_charset() == "utf-8"
