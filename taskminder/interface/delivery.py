"""Delivery collaborator: render a recipient's batch and hand it to a transport."""

import logging

from taskminder.core import message_templates
from taskminder.core.config import settings
from taskminder.domain.task import NotifyChannel, Task
from taskminder.interface import email_sender, sms_sender
from taskminder.models.service_models import NotificationBatch, SendMessageResult


logger = logging.getLogger(__name__)


def _reminder_item(task: Task) -> message_templates.ReminderItem:
    if task.completion_token:
        url = message_templates.completion_link(app_url=settings.app_url, token=task.completion_token)
    else:
        url = message_templates.dashboard_link(app_url=settings.app_url)
    return (task.title, task.description, task.next_due_date.isoformat(), url)


async def deliver(batch: NotificationBatch) -> SendMessageResult:
    """Send one aggregated reminder for every task in the batch.

    Returns:
        SendMessageResult from the transport; never raises for transport errors
    """
    items = [_reminder_item(task) for task in batch.tasks]

    if batch.channel == NotifyChannel.EMAIL:
        return await email_sender.send_email(
            to_email=batch.address,
            subject=message_templates.reminder_subject(items=items),
            html=message_templates.reminder_email_html(items=items, app_url=settings.app_url),
            text=message_templates.reminder_text(items=items),
        )

    if batch.channel == NotifyChannel.SMS:
        return await sms_sender.send_sms(to_phone=batch.address, text=message_templates.reminder_text(items=items))

    logger.error("Unsupported delivery channel", extra={"channel": str(batch.channel)})
    return SendMessageResult(success=False, error=f"Unsupported channel: {batch.channel}")
