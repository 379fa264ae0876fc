"""Test doubles for the relay and the rate limiter clock."""

from src.shared.mail.relay import MailRelayError


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeRelay:
    """Records messages instead of talking SMTP. `fail_on` is the 1-based send that raises."""

    def __init__(self, fail_on=None, verify_error=None):
        self.sent = []
        self.attempts = 0
        self.verified = False
        self.fail_on = fail_on
        self.verify_error = verify_error

    def verify(self):
        if self.verify_error:
            raise self.verify_error
        self.verified = True

    def send(self, message):
        self.attempts += 1
        if self.fail_on == self.attempts:
            raise MailRelayError("535 Authentication failed", code=535,
                                 response="535 5.7.8 Bad credentials", command="AUTH PLAIN")
        self.sent.append(message)
        return f"<test-{self.attempts}@example.com>"
