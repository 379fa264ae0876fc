import random
import re
from datetime import datetime

from src.shared.contact.ticket import make_ticket

TICKET_RE = re.compile(r"^[A-Z]+-\d{8}-[A-Z0-9]{6}$")


def test_ticket_format():
    for _ in range(50):
        assert TICKET_RE.match(make_ticket("GEONIX"))


def test_ticket_date_is_zero_padded():
    ticket = make_ticket("GEONIX", now=datetime(2026, 2, 3, 9, 30))
    assert ticket.startswith("GEONIX-20260203-")


def test_ticket_suffix_follows_rng():
    first = make_ticket(now=datetime(2026, 1, 1), rng=random.Random(7))
    second = make_ticket(now=datetime(2026, 1, 1), rng=random.Random(7))
    assert first == second
    assert first.startswith("GEONIX-20260101-")
