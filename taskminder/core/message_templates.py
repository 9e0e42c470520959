"""Centralized message templates for reminder notifications.

All user-facing reminder strings are defined here. Each reminder item is a
(title, description, due_date_str, complete_url) tuple.
"""

from html import escape


ReminderItem = tuple[str, str | None, str, str]


def completion_link(*, app_url: str, token: str) -> str:
    return f"{app_url.rstrip('/')}/api/tasks/complete?token={token}"


def dashboard_link(*, app_url: str) -> str:
    return f"{app_url.rstrip('/')}/dashboard"


def reminder_subject(*, items: list[ReminderItem]) -> str:
    if len(items) == 1:
        return f"⏰ Reminder: {items[0][0]} is due today"
    return f"⏰ Reminder: {len(items)} tasks are due today"


def reminder_email_html(*, items: list[ReminderItem], app_url: str) -> str:
    """Build the HTML body of a reminder email, one card per task."""
    heading = "Task Due Today" if len(items) == 1 else f"{len(items)} Tasks Due Today"

    cards = []
    for title, description, due, url in items:
        description_html = f'<p style="color: #666; margin: 10px 0;">{escape(description)}</p>' if description else ""
        cards.append(
            '<div style="background: white; padding: 20px; border-radius: 8px; margin: 20px 0; '
            'border-left: 4px solid #667eea;">'
            f'<h3 style="margin-top: 0; color: #333;">{escape(title)}</h3>'
            f"{description_html}"
            f'<p style="color: #999; font-size: 14px;">\U0001f4c5 Due: {escape(due)}</p>'
            f'<a href="{escape(url)}" style="background: #667eea; color: white; padding: 10px 20px; '
            'text-decoration: none; border-radius: 6px; display: inline-block; font-weight: bold;">'
            "✓ Mark as Complete</a>"
            "</div>"
        )

    return (
        '<!DOCTYPE html><html><head><meta charset="utf-8"></head>'
        '<body style="font-family: Arial, sans-serif; color: #333; max-width: 600px; margin: 0 auto;">'
        '<h1 style="color: #667eea;">\U0001f4cb Task Reminder</h1>'
        f"<h2>{heading}</h2>"
        f"{''.join(cards)}"
        f'<p style="color: #999; font-size: 13px;">You can also manage your tasks from your '
        f'<a href="{escape(dashboard_link(app_url=app_url))}">dashboard</a>.</p>'
        "</body></html>"
    )


def reminder_text(*, items: list[ReminderItem]) -> str:
    """Build the plain-text reminder used for SMS and as the email text part."""
    if len(items) == 1:
        title, _, due, url = items[0]
        return f"⏰ {title} is due today ({due}). Done? {url}"

    lines = "\n".join(f"• {title} (due: {due}) {url}" for title, _, due, url in items)
    return f"⏰ {len(items)} tasks are due today:\n{lines}"
