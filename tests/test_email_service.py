import asyncio
from datetime import datetime
from unittest.mock import MagicMock

import requests

from app.models.notifications import PaymentNotificationData
from app.services.email.service import EmailService
from app.services.email.templates import format_rand
from tests.fakes import FakeSession

ADMIN = "websales@akalaw.co.za"


def notification(**overrides):
    values = dict(
        customer_name="Ada Bloggs",
        customer_email="a@b.com",
        customer_phone="0820000000",
        document_title="Last Will & Testament",
        document_category="estate",
        document_id="2",
        amount=550,
        reference="AKA_LAW_1_AAAAAA",
        payment_date=datetime(2026, 10, 19, 8, 0),
    )
    values.update(overrides)
    return PaymentNotificationData(**values)


def send(service, data):
    return asyncio.run(service.send_payment_notification_emails(data))


def test_sends_customer_and_admin_emails(email_service, email_session):
    result = send(email_service, notification())

    assert result.customer_email_sent is True
    assert result.admin_email_sent is True
    recipients = sorted(call["json"]["to"][0] for call in email_session.calls)
    assert recipients == ["a@b.com", ADMIN]

    customer_call = next(c for c in email_session.calls if c["json"]["to"] == ["a@b.com"])
    assert customer_call["url"] == "https://api.resend.com/emails"
    assert customer_call["json"]["from"] == "AKA Law <info@akalaw.co.za>"
    assert customer_call["json"]["subject"] == (
        "Your Legal Document: Last Will & Testament - Reference AKA_LAW_1_AAAAAA"
    )
    assert "https://akalaw.test/download/AKA_LAW_1_AAAAAA" in customer_call["json"]["html"]

    admin_call = next(c for c in email_session.calls if c["json"]["to"] == [ADMIN])
    assert admin_call["json"]["subject"] == "New Document Purchase - R550 - Ada Bloggs"
    assert "Monday, 19 October 2026, 08:00" in admin_call["json"]["html"]


def test_one_failed_send_does_not_affect_the_other(email_service, email_session):
    email_session.failing_recipients.add("a@b.com")

    result = send(email_service, notification())

    assert result.customer_email_sent is False
    assert result.admin_email_sent is True


def test_unconfigured_service_sends_nothing():
    session = FakeSession()
    service = EmailService(api_key="", site_base_url="https://akalaw.test", session=session)

    result = send(service, notification())

    assert service.is_available is False
    assert result.customer_email_sent is False
    assert result.admin_email_sent is False
    assert session.calls == []


def test_customer_supplied_values_are_escaped(email_service, email_session):
    send(email_service, notification(customer_name="<script>alert(1)</script>"))

    for call in email_session.calls:
        assert "<script>" not in call["json"]["html"]
        assert "&lt;script&gt;" in call["json"]["html"]


def test_format_rand():
    assert format_rand(550) == "R550"
    assert format_rand(1550) == "R1,550"
    assert format_rand(19.5) == "R19.50"


def test_transport_error_is_reported_as_not_sent():
    session = MagicMock()
    session.post.side_effect = requests.Timeout("timed out")
    service = EmailService(
        api_key="re_test_key", site_base_url="https://akalaw.test", session=session
    )

    result = send(service, notification())

    assert result.customer_email_sent is False
    assert result.admin_email_sent is False
    assert session.post.call_count == 2
