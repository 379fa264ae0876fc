"""Human-readable ticket numbers for accepted contact submissions."""

import random
import string
from datetime import datetime
from typing import Optional


TICKET_PREFIX = "GEONIX"
TICKET_ALPHABET = string.ascii_uppercase + string.digits
TICKET_SUFFIX_LENGTH = 6


def make_ticket(prefix: str = TICKET_PREFIX, now: Optional[datetime] = None,
                rng: Optional[random.Random] = None) -> str:
    """
    Build a ticket like GEONIX-20260210-7F3KQ9.

    The suffix comes from `random`, not `secrets`: tickets are reference
    labels quoted in emails, not credentials, and collisions are tolerated.
    """
    now = now or datetime.now()
    rng = rng or random
    suffix = "".join(rng.choice(TICKET_ALPHABET) for _ in range(TICKET_SUFFIX_LENGTH))
    return f"{prefix}-{now:%Y%m%d}-{suffix}"
