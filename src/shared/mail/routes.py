"""Mail relay diagnostic route for operators."""

import logging
from datetime import datetime
from typing import Callable

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from src.shared.mail.config import MailConfig, load_mail_config
from src.shared.mail.relay import MailMessage, MailRelayError, SmtpRelay

router = APIRouter(prefix="/api/mail-test", tags=["mail"])


def get_mail_config() -> MailConfig:
    return load_mail_config()


def get_relay_factory() -> Callable[[MailConfig], SmtpRelay]:
    return SmtpRelay


def build_test_message(config: MailConfig) -> MailMessage:
    sent_at = datetime.now().isoformat(timespec="seconds")
    return MailMessage(
        from_addr=("GEONIX Mail Test", config.user),
        to_addr=config.to,
        reply_to=config.to,
        subject=f"[GEONIX] SMTP test {sent_at}",
        body=f"SMTP relay test message.\n\nHost: {config.host}:{config.port}\nSecure: {config.secure}\nSent at: {sent_at}",
    )


@router.post("")
async def send_test_mail(
    config: MailConfig = Depends(get_mail_config),
    relay_factory: Callable[[MailConfig], SmtpRelay] = Depends(get_relay_factory),
):
    """
    Verify the SMTP relay credentials and send one test message to MAIL_TO.

    Unlike the contact route, failures return the relay's own error detail
    (code, response, command) so an operator can see what went wrong.
    """
    if not config.is_complete:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"ok": False, "error": "server_not_configured", "missing": config.missing_fields()},
        )

    relay = relay_factory(config)
    try:
        await run_in_threadpool(relay.verify)
        message_id = await run_in_threadpool(relay.send, build_test_message(config))
    except MailRelayError as e:
        logging.error(f"SMTP test failed: {str(e)} (code={e.code}, command={e.command})")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"ok": False, **e.to_dict()},
        )
    except Exception as e:
        logging.error(f"SMTP test failed: {str(e)}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"ok": False, "error": str(e) or e.__class__.__name__},
        )

    logging.info(f"SMTP test message sent: {message_id}")
    return {"ok": True, "messageId": message_id}
