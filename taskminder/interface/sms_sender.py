"""SMS transport using the Twilio Messages API."""

import logging

from taskminder.core.config import settings
from taskminder.interface.http_retry import post_with_retry
from taskminder.models.service_models import SendMessageResult


logger = logging.getLogger(__name__)

TWILIO_MESSAGES_URL = "https://api.twilio.com/2010-04-01/Accounts/{account_sid}/Messages.json"

# Twilio splits longer bodies into segments; keep reminders to a handful
MAX_SMS_LENGTH = 640


async def send_sms(
    *,
    to_phone: str,
    text: str,
    max_retries: int = 3,
    retry_delay: float = 1.0,
) -> SendMessageResult:
    """Send an SMS via Twilio with retry logic."""
    try:
        account_sid = settings.require_credential("twilio_account_sid", "Twilio")
        auth_token = settings.require_credential("twilio_auth_token", "Twilio")
        from_number = settings.require_credential("twilio_from_number", "Twilio")
    except ValueError as e:
        logger.warning("SMS transport not configured: %s", e)
        return SendMessageResult(success=False, error=str(e))

    body = text if len(text) <= MAX_SMS_LENGTH else text[: MAX_SMS_LENGTH - 1] + "…"

    return await post_with_retry(
        url=TWILIO_MESSAGES_URL.format(account_sid=account_sid),
        extract_id=lambda data: data.get("sid"),
        max_retries=max_retries,
        retry_delay=retry_delay,
        data={"To": to_phone, "From": from_number, "Body": body},
        auth=(account_sid, auth_token),
    )
