"""Email transport using the Resend HTTP API."""

import logging

from taskminder.core.config import settings
from taskminder.interface.http_retry import post_with_retry
from taskminder.models.service_models import SendMessageResult


logger = logging.getLogger(__name__)

RESEND_EMAILS_URL = "https://api.resend.com/emails"


async def send_email(
    *,
    to_email: str,
    subject: str,
    html: str,
    text: str,
    max_retries: int = 3,
    retry_delay: float = 1.0,
) -> SendMessageResult:
    """Send a single email via Resend with retry logic."""
    try:
        api_key = settings.require_credential("resend_api_key", "Resend")
    except ValueError as e:
        logger.warning("Email transport not configured: %s", e)
        return SendMessageResult(success=False, error=str(e))

    return await post_with_retry(
        url=RESEND_EMAILS_URL,
        extract_id=lambda data: data.get("id"),
        max_retries=max_retries,
        retry_delay=retry_delay,
        json={
            "from": settings.email_from,
            "to": [to_email],
            "subject": subject,
            "html": html,
            "text": text,
        },
        headers={"Authorization": f"Bearer {api_key}"},
    )
