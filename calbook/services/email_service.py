import asyncio
import logging
import smtplib
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from zoneinfo import ZoneInfo

from calbook.core.config import Settings
from calbook.core.errors import NotificationError

logger = logging.getLogger(__name__)


def _send_email_sync(
    settings: Settings, to_email: str, subject: str, html_body: str, from_name: str
) -> None:
    """Send email via SMTP (blocking). Raises on failure."""
    if not settings.email_enabled:
        logger.warning("Email disabled (SMTP not configured), skipping send to %s", to_email)
        return
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = f"{from_name} <{settings.email_user}>"
    msg["To"] = to_email
    msg.attach(MIMEText(html_body, "html", "utf-8"))
    with smtplib.SMTP(settings.smtp_host, settings.smtp_port) as server:
        server.starttls()
        server.login(settings.email_user, settings.email_pass)
        server.sendmail(settings.email_user, [to_email], msg.as_string())
    logger.info("Email sent to %s", to_email)


def _html_escape(s: str) -> str:
    return (
        s.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def _format_local(start: datetime, tz: ZoneInfo) -> tuple[str, str]:
    local = start.astimezone(tz)
    return local.strftime("%A, %B %d, %Y"), local.strftime("%I:%M %p")


def _meeting_link_html(meeting_link: str | None) -> str:
    if not meeting_link:
        return "<p><b>Meeting Link:</b> the link will be shared with you before the meeting.</p>"
    link = _html_escape(meeting_link)
    return f'<p><b>Meeting Link:</b> <a href="{link}">{link}</a></p>'


def build_client_confirmation_html(
    name: str, start: datetime, meeting_link: str | None, tz: ZoneInfo
) -> str:
    date_str, time_str = _format_local(start, tz)
    return f"""
<h1>Appointment Confirmed!</h1>
<p>Hello {_html_escape(name)},</p>
<p>Your appointment has been successfully booked. Here are the details:</p>
<p><b>Date:</b> {date_str}</p>
<p><b>Time:</b> {time_str}</p>
{_meeting_link_html(meeting_link)}
<p>Please join using the link above at the scheduled time.</p>
"""


def build_admin_alert_html(
    name: str, email: str, start: datetime, meeting_link: str | None, tz: ZoneInfo
) -> str:
    date_str, time_str = _format_local(start, tz)
    return f"""
<h1>New Appointment!</h1>
<p>A new appointment has been booked with the following details:</p>
<ul>
  <li><b>Name:</b> {_html_escape(name)}</li>
  <li><b>Email:</b> {_html_escape(email)}</li>
  <li><b>Date:</b> {date_str}</li>
  <li><b>Time:</b> {time_str}</li>
</ul>
{_meeting_link_html(meeting_link)}
"""


async def send_booking_notifications(
    name: str,
    email: str,
    start: datetime,
    meeting_link: str | None,
    *,
    settings: Settings,
) -> None:
    """Send the client confirmation and the admin alert concurrently.

    Both must go out; the first failure is raised as NotificationError.
    """
    tz = settings.tz
    sends = [
        asyncio.to_thread(
            _send_email_sync,
            settings,
            email,
            "✅ Appointment Confirmed!",
            build_client_confirmation_html(name, start, meeting_link, tz),
            settings.from_name,
        )
    ]
    if settings.admin_email:
        sends.append(
            asyncio.to_thread(
                _send_email_sync,
                settings,
                settings.admin_email,
                f"🔔 New Appointment with {name}",
                build_admin_alert_html(name, email, start, meeting_link, tz),
                settings.admin_from_name,
            )
        )
    else:
        logger.warning("ADMIN_EMAIL not set, skipping admin notification")
    try:
        await asyncio.gather(*sends)
    except (smtplib.SMTPException, OSError) as e:
        logger.exception("Failed to send booking notifications: %s", e)
        raise NotificationError() from e
    logger.info("Confirmation and notification emails sent for %s", email)
