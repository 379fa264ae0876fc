"""Mail relay configuration loaded from environment variables."""

import os
from dataclasses import dataclass
from typing import List, Mapping, Optional

from dotenv import load_dotenv

# Load environment variables from .env file (for local development)
load_dotenv()


DEFAULT_MAIL_PORT = 465
DEFAULT_MAIL_TIMEOUT = 10.0


@dataclass(frozen=True)
class MailConfig:
    """SMTP relay settings (MAIL_* environment variables)."""
    host: Optional[str]
    port: int
    secure: bool
    user: Optional[str]
    password: Optional[str]
    to: Optional[str]
    timeout: float = DEFAULT_MAIL_TIMEOUT

    def missing_fields(self) -> List[str]:
        """Names of the required variables that are unset or empty."""
        required = {
            "MAIL_HOST": self.host,
            "MAIL_USER": self.user,
            "MAIL_PASS": self.password,
            "MAIL_TO": self.to,
        }
        return [name for name, value in required.items() if not value]

    @property
    def is_complete(self) -> bool:
        return not self.missing_fields()


def load_mail_config(environ: Optional[Mapping[str, str]] = None) -> MailConfig:
    """
    Build a MailConfig from the environment.

    MAIL_PORT defaults to 465 and MAIL_SECURE to "true"; only the exact
    string "true" turns on implicit TLS.
    """
    env = os.environ if environ is None else environ

    try:
        port = int(env.get("MAIL_PORT") or DEFAULT_MAIL_PORT)
    except ValueError:
        port = DEFAULT_MAIL_PORT

    try:
        timeout = float(env.get("MAIL_TIMEOUT") or DEFAULT_MAIL_TIMEOUT)
    except ValueError:
        timeout = DEFAULT_MAIL_TIMEOUT

    return MailConfig(
        host=env.get("MAIL_HOST") or None,
        port=port,
        secure=str(env.get("MAIL_SECURE") or "true") == "true",
        user=env.get("MAIL_USER") or None,
        password=env.get("MAIL_PASS") or None,
        to=env.get("MAIL_TO") or None,
        timeout=timeout,
    )
