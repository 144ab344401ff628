"""Customer email content for installation updates.

The template is picked by installation status; statuses without their own
entry use the generic update template, and a milestone reported while the
installation is still scheduled uses the pre-work progress template. Every
value taken from the event is HTML-escaped before it is placed in the HTML
body.
"""

from __future__ import annotations

from html import escape
from typing import Callable, Dict, List, Optional, Tuple

from installations_api.notifications.events import NotificationEvent, RenderedMessage

COMPANY_NAME = "SolarBiz Installation Team"
COMPANY_PHONE = "(555) 123-4567"
COMPANY_EMAIL = "installations@solarbiz.com"

Section = Tuple[str, List[str], List[Tuple[str, str]], List[str]]


def _scheduled(event: NotificationEvent) -> Section:
    details = [
        ("Installation Number", event.installation_number),
        ("Scheduled Date", event.scheduled_date or "TBD"),
    ]
    return (
        "Your Solar Installation Has Been Scheduled!",
        ["Great news! Your solar installation has been scheduled."],
        details,
        [
            "Our installation team will contact you 24-48 hours before the scheduled date "
            "to confirm timing and prepare for the installation.",
            "If you have any questions, please don't hesitate to contact us.",
        ],
    )


def _pre_work_step(event: NotificationEvent) -> Section:
    details = [
        ("Installation Number", event.installation_number),
        ("Completed Step", event.milestone or ""),
        ("Scheduled Installation Date", event.scheduled_date or "TBD"),
    ]
    if event.next_step:
        details.append(("Next Step", event.next_step))
    return (
        "Installation Progress Update",
        ["We've finished another step in preparing for your solar installation."],
        details,
        ["We'll keep you updated as we get closer to your installation date."],
    )


def _in_progress(event: NotificationEvent) -> Section:
    details = [
        ("Installation Number", event.installation_number),
        ("Current Status", event.milestone or "In Progress"),
    ]
    if event.next_step:
        details.append(("Next Step", event.next_step))
    return (
        "Installation Progress Update",
        ["We wanted to update you on the progress of your solar installation."],
        details,
        ["Your installation is progressing well and we'll keep you updated on any significant milestones."],
    )


def _completed(event: NotificationEvent) -> Section:
    details = [
        ("Installation Number", event.installation_number),
        ("Completion Date", event.completed_date or "Pending confirmation"),
    ]
    if event.milestone:
        details.append(("Milestone", event.milestone))
    return (
        "Your Solar Installation is Complete!",
        ["Congratulations! Your solar installation has been successfully completed."],
        details,
        [
            "Your system is now ready to start generating clean, renewable energy for your home!",
            "What's next: utility interconnection (if not already complete), system monitoring setup, "
            "and final paperwork and warranty information.",
            "Thank you for choosing solar energy and trusting us with your installation!",
        ],
    )


def _generic(event: NotificationEvent) -> Section:
    details = [
        ("Installation Number", event.installation_number),
        ("Status", event.status.replace("_", " ")),
    ]
    if event.milestone:
        details.append(("Milestone", event.milestone))
    if event.next_step:
        details.append(("Next Step", event.next_step))
    return (
        "Installation Update",
        ["We have an update regarding your solar installation."],
        details,
        ["We'll continue to keep you updated on your installation progress."],
    )


TEMPLATES: Dict[str, Tuple[str, Callable[[NotificationEvent], Section]]] = {
    "scheduled": ("Installation Scheduled - {number}", _scheduled),
    "in_progress": ("Installation Update - {number}", _in_progress),
    "completed": ("Installation Complete - {number}", _completed),
}
GENERIC_TEMPLATE: Tuple[str, Callable[[NotificationEvent], Section]] = ("Installation Update - {number}", _generic)
PRE_WORK_TEMPLATE: Tuple[str, Callable[[NotificationEvent], Section]] = (
    "Installation Update - {number}",
    _pre_work_step,
)


def template_for(
    status: Optional[str], milestone: Optional[str] = None
) -> Tuple[str, Callable[[NotificationEvent], Section]]:
    key = str(status or "").strip().lower()
    # A milestone finished before work starts is progress, not a new booking.
    if key == "scheduled" and milestone:
        return PRE_WORK_TEMPLATE
    return TEMPLATES.get(key, GENERIC_TEMPLATE)


def render_message(event: NotificationEvent) -> RenderedMessage:
    subject_format, builder = template_for(event.status, event.milestone)
    heading, intro, details, closing = builder(event)
    subject = subject_format.format(number=event.installation_number)

    greeting = f"Dear {event.customer_name},"
    html_parts = [f"<h1>{escape(heading)}</h1>", f"<p>{escape(greeting)}</p>"]
    html_parts.extend(f"<p>{escape(line)}</p>" for line in intro)
    html_parts.append("<ul>")
    html_parts.extend(f"<li><strong>{escape(label)}:</strong> {escape(value)}</li>" for label, value in details)
    html_parts.append("</ul>")
    html_parts.extend(f"<p>{escape(line)}</p>" for line in closing)
    html = (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">'
        + "".join(html_parts)
        + '<hr style="margin: 30px 0; border: none; border-top: 1px solid #eee;">'
        + f'<p style="color: #666; font-size: 14px;"><strong>{COMPANY_NAME}</strong><br>'
        + f"Phone: {COMPANY_PHONE}<br>Email: {COMPANY_EMAIL}</p>"
        + "</div>"
    )

    text_lines = [heading, "", greeting, ""]
    text_lines.extend(intro)
    text_lines.append("")
    text_lines.extend(f"- {label}: {value}" for label, value in details)
    text_lines.append("")
    text_lines.extend(closing)
    text_lines.extend(["", "--", COMPANY_NAME, f"Phone: {COMPANY_PHONE}", f"Email: {COMPANY_EMAIL}"])
    return RenderedMessage(subject=subject, html=html, text="\n".join(text_lines))
