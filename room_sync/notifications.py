"""
Webex message notifications for Webex Room Sync.

This module formats a SyncReport and delivers it as a direct Webex message to
each configured address. Delivery is best effort: failures are logged and
never change the outcome of the sync run.
"""

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Any, Iterable

from room_sync.models import SyncReport
from room_sync.webex_client import WebexClient

logger = logging.getLogger(__name__)


def format_report(report: SyncReport) -> str:
    """
    Render a report as Webex markdown.

    Args:
        report: Result of a sync run

    Returns:
        Markdown with a bold heading and the report as a fenced JSON block
    """
    lines = [
        "**Membership updates**",
        "```json",
        json.dumps(report.to_dict(), indent=2),
        "```",
    ]
    return '\n'.join(lines)


def send_report(client: WebexClient, email: str, report: SyncReport) -> Dict[str, Any]:
    """
    Send a report to one person by email address.

    Returns:
        The created message as returned by the API

    Raises:
        TransportError: If the message could not be created
    """
    logger.debug(f"Sending sync report to {email}")
    return client.create_message(email, format_report(report))


def notify_recipients(
    client: WebexClient,
    recipients: Iterable[str],
    report: SyncReport,
    max_workers: int = 10
) -> Dict[str, bool]:
    """
    Send a report to every recipient and wait for all deliveries to settle.

    Args:
        client: Webex client
        recipients: Email addresses to message
        report: Result of a sync run
        max_workers: Upper bound on concurrent deliveries

    Returns:
        Mapping of recipient to True if the message was delivered
    """
    recipients = list(recipients)
    if not recipients:
        logger.debug("No report recipients configured")
        return {}

    outcomes = {}
    with ThreadPoolExecutor(max_workers=min(max_workers, len(recipients))) as executor:
        futures = [(email, executor.submit(send_report, client, email, report)) for email in recipients]
        for email, future in futures:
            try:
                future.result()
                outcomes[email] = True
                logger.info(f"Sync report sent to {email}")
            except Exception as e:
                outcomes[email] = False
                logger.error(f"Failed to send sync report to {email}: {e}")

    return outcomes
