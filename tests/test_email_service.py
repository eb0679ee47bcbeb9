"""Tests for the booking notification emails."""

import email
import smtplib
from datetime import UTC, datetime
from unittest.mock import MagicMock, patch
from zoneinfo import ZoneInfo

import pytest

from calbook.core.config import Settings
from calbook.core.errors import NotificationError
from calbook.services.email_service import (
    build_admin_alert_html,
    build_client_confirmation_html,
    send_booking_notifications,
)

KARACHI = ZoneInfo("Asia/Karachi")
START = datetime(2026, 10, 20, 9, 30, tzinfo=UTC)


def _settings(**overrides):
    values = {
        "email_user": "bookings@example.com",
        "email_pass": "secret",
        "admin_email": "admin@example.com",
        "timezone": "Asia/Karachi",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def _html_body(raw_message: str) -> str:
    message = email.message_from_string(raw_message)
    return message.get_payload(0).get_payload(decode=True).decode("utf-8")


@pytest.fixture
def mock_smtp():
    with patch("calbook.services.email_service.smtplib.SMTP") as smtp_cls:
        server = MagicMock()
        smtp_cls.return_value.__enter__.return_value = server
        yield server


def test_client_confirmation_renders_local_time():
    html = build_client_confirmation_html("Ayesha", START, "https://meet.google.com/abc", KARACHI)
    assert "Hello Ayesha" in html
    assert "Tuesday, October 20, 2026" in html
    assert "02:30 PM" in html
    assert '<a href="https://meet.google.com/abc">' in html


def test_admin_alert_escapes_user_input():
    html = build_admin_alert_html("<b>Eve</b>", "eve@example.com", START, None, KARACHI)
    assert "&lt;b&gt;Eve&lt;/b&gt;" in html
    assert "eve@example.com" in html
    assert "will be shared" in html
    assert "<a href" not in html


@pytest.mark.asyncio
async def test_sends_client_and_admin_emails(mock_smtp):
    await send_booking_notifications(
        "Ayesha", "ayesha@example.com", START, "https://meet.google.com/abc", settings=_settings()
    )

    recipients = sorted(call.args[1][0] for call in mock_smtp.sendmail.call_args_list)
    assert recipients == ["admin@example.com", "ayesha@example.com"]
    assert mock_smtp.login.call_count == 2
    mock_smtp.login.assert_called_with("bookings@example.com", "secret")


@pytest.mark.asyncio
async def test_only_client_email_without_admin_address(mock_smtp):
    await send_booking_notifications(
        "Ayesha", "ayesha@example.com", START, None, settings=_settings(admin_email="")
    )

    mock_smtp.sendmail.assert_called_once()
    assert mock_smtp.sendmail.call_args.args[1] == ["ayesha@example.com"]


@pytest.mark.asyncio
async def test_uses_timezone_and_admin_from_given_settings(mock_smtp):
    settings = _settings(timezone="UTC", admin_email="ops@example.com")
    await send_booking_notifications("Ayesha", "ayesha@example.com", START, None, settings=settings)

    messages = {call.args[1][0]: _html_body(call.args[2]) for call in mock_smtp.sendmail.call_args_list}
    assert set(messages) == {"ayesha@example.com", "ops@example.com"}
    # 09:30 UTC, not 02:30 PM Karachi time
    assert "09:30 AM" in messages["ayesha@example.com"]


@pytest.mark.asyncio
async def test_one_failed_send_fails_the_whole_operation(mock_smtp):
    mock_smtp.sendmail.side_effect = [None, smtplib.SMTPRecipientsRefused({})]
    with pytest.raises(NotificationError):
        await send_booking_notifications("Ayesha", "ayesha@example.com", START, None, settings=_settings())


@pytest.mark.asyncio
async def test_sending_skipped_when_smtp_not_configured(mock_smtp):
    unconfigured = _settings(email_user="", email_pass="")
    await send_booking_notifications("Ayesha", "ayesha@example.com", START, None, settings=unconfigured)
    mock_smtp.sendmail.assert_not_called()
