#!/usr/bin/env python3
"""Trigger the daily reminder run over HTTP, as an external cron would."""

import argparse
import logging
import os
import sys

import httpx


logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)

# HTTP status codes
HTTP_OK = 200


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--url", default=os.environ.get("APP_URL", "http://127.0.0.1:8000"), help="Base URL")
    parser.add_argument("--secret", default=os.environ.get("CRON_SECRET"), help="Cron secret (default: $CRON_SECRET)")
    args = parser.parse_args()

    if not args.secret:
        logger.error("No cron secret given; pass --secret or set CRON_SECRET")
        return 1

    response = httpx.get(
        f"{args.url.rstrip('/')}/api/cron/send-reminders",
        headers={"Authorization": f"Bearer {args.secret}"},
        timeout=120,
    )

    if response.status_code == HTTP_OK:
        logger.info("Reminder run finished: %s", response.json())
        return 0

    logger.error("Reminder run failed. Status: %s, Response: %s", response.status_code, response.text)
    return 1


if __name__ == "__main__":
    sys.exit(main())
