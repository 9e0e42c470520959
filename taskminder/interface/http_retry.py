"""Shared HTTP POST with retry for notification transports."""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

import httpx

from taskminder.core.config import constants
from taskminder.models.service_models import SendMessageResult


logger = logging.getLogger(__name__)


# HTTP status code constants for error handling
HTTP_CLIENT_ERROR_START = 400
HTTP_CLIENT_ERROR_END = 500


async def post_with_retry(
    *,
    url: str,
    extract_id: Callable[[dict[str, Any]], str | None],
    max_retries: int,
    retry_delay: float,
    **request_kwargs: Any,
) -> SendMessageResult:
    """POST to a provider API, retrying server and network errors with backoff.

    Client errors (4xx) are not retried.
    """
    for attempt in range(max_retries):
        try:
            async with httpx.AsyncClient(timeout=constants.API_TIMEOUT_SECONDS) as client:
                response = await client.post(url, **request_kwargs)

                if response.is_success:
                    return SendMessageResult(success=True, message_id=extract_id(response.json()))

                if HTTP_CLIENT_ERROR_START <= response.status_code < HTTP_CLIENT_ERROR_END:
                    return SendMessageResult(success=False, error=f"Client error: {response.text}")

                raise httpx.HTTPStatusError(
                    f"Server error: {response.status_code}", request=response.request, response=response
                )
        except httpx.HTTPStatusError as e:
            logger.warning("Provider returned server error (attempt %d/%d): %s", attempt + 1, max_retries, e)
            if attempt < max_retries - 1:
                await asyncio.sleep(retry_delay * (2**attempt))
        except Exception as e:
            logger.warning("Provider request failed (attempt %d/%d): %s", attempt + 1, max_retries, e)
            if attempt < max_retries - 1:
                await asyncio.sleep(retry_delay * (2**attempt))
            else:
                return SendMessageResult(success=False, error=f"Failed after retries: {e!s}")

    return SendMessageResult(success=False, error="Max retries exceeded")
