"""
Email Service

Sends the customer document email and the admin payment notification through the
Resend API. Sends never raise: every provider failure is logged and reported as False.
"""

import asyncio
import logging
from traceback import format_exc
from typing import Optional

import requests
from pydantic import BaseModel

from app.models.notifications import (
    AdminEmailData,
    CustomerEmailData,
    NotificationResult,
    PaymentNotificationData,
)
from app.services.email.templates import (
    format_rand,
    get_admin_email_template,
    get_customer_email_template,
)
from app.services.exceptions import NotificationError

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class EmailSettings(BaseModel):
    """Sender identities for outgoing email."""

    from_address: str = "info@akalaw.co.za"
    from_name: str = "AKA Law"
    admin_address: str = "websales@akalaw.co.za"
    reply_to: str = "info@akalaw.co.za"

    @property
    def sender(self) -> str:
        return f"{self.from_name} <{self.from_address}>"


class EmailService:
    """Transactional email via Resend."""

    BASE_URL = "https://api.resend.com"
    TIMEOUT = 10  # seconds

    def __init__(
        self,
        api_key: Optional[str],
        site_base_url: str,
        settings: Optional[EmailSettings] = None,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[int] = None,
    ):
        self.api_key = api_key
        self.site_base_url = site_base_url.rstrip("/")
        self.settings = settings or EmailSettings()
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout or self.TIMEOUT

    @property
    def is_available(self) -> bool:
        """Whether an API key is configured."""
        return bool(self.api_key)

    def download_url(self, reference: str) -> str:
        return f"{self.site_base_url}/download/{reference}"

    def _send(self, to: str, subject: str, html: str) -> str:
        """
        Send a single email.

        Returns:
            The provider's email ID

        Raises:
            NotificationError: If the provider call fails
        """
        try:
            response = self.session.post(
                f"{self.base_url}/emails",
                json={
                    "from": self.settings.sender,
                    "to": [to],
                    "reply_to": self.settings.reply_to,
                    "subject": subject,
                    "html": html,
                },
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise NotificationError(f"Resend request failed: {str(e)}") from e

        if not response.ok:
            raise NotificationError(
                f"Resend API error: {response.status_code} {response.text}"
            )

        try:
            return response.json().get("id", "")
        except ValueError:
            return ""

    def send_customer_document_email(self, data: CustomerEmailData) -> bool:
        """Send the document delivery email to the customer."""
        if not self.is_available:
            logger.warning("Email service not configured. Skipping customer email.")
            return False

        try:
            email_id = self._send(
                to=data.customer_email,
                subject=f"Your Legal Document: {data.document_title} - Reference {data.reference}",
                html=get_customer_email_template(data),
            )
        except NotificationError as e:
            logger.error(f"Failed to send customer email for {data.reference}: {e.message}")
            return False
        except Exception as e:
            logger.error(
                f"Error sending customer email for {data.reference}: {str(e)}\n{format_exc()}"
            )
            return False

        logger.info(
            f"Customer document email {email_id} sent to {data.customer_email} "
            f"({data.document_title}, {data.reference})"
        )
        return True

    def send_admin_notification_email(self, data: AdminEmailData) -> bool:
        """Send the payment notification to the admin mailbox."""
        if not self.is_available:
            logger.warning("Email service not configured. Skipping admin notification.")
            return False

        try:
            email_id = self._send(
                to=self.settings.admin_address,
                subject=f"New Document Purchase - {format_rand(data.amount)} - {data.customer_name}",
                html=get_admin_email_template(data),
            )
        except NotificationError as e:
            logger.error(f"Failed to send admin email for {data.reference}: {e.message}")
            return False
        except Exception as e:
            logger.error(
                f"Error sending admin email for {data.reference}: {str(e)}\n{format_exc()}"
            )
            return False

        logger.info(
            f"Admin notification email {email_id} sent to {self.settings.admin_address} "
            f"({data.customer_name}, {data.reference})"
        )
        return True

    async def send_payment_notification_emails(
        self, data: PaymentNotificationData
    ) -> NotificationResult:
        """
        Send the customer and admin emails for a successful payment.

        Both sends run concurrently; the outcome of one never affects the other.
        """
        customer_email_data = CustomerEmailData(
            customer_name=data.customer_name,
            customer_email=data.customer_email,
            document_title=data.document_title,
            amount=data.amount,
            reference=data.reference,
            download_url=self.download_url(data.reference),
        )
        admin_email_data = AdminEmailData(
            customer_name=data.customer_name,
            customer_email=data.customer_email,
            customer_phone=data.customer_phone,
            document_title=data.document_title,
            document_category=data.document_category,
            amount=data.amount,
            reference=data.reference,
            payment_date=data.payment_date.strftime("%A, %d %B %Y, %H:%M"),
        )

        customer_email_sent, admin_email_sent = await asyncio.gather(
            asyncio.to_thread(self.send_customer_document_email, customer_email_data),
            asyncio.to_thread(self.send_admin_notification_email, admin_email_data),
        )

        logger.info(
            f"Payment notification emails for {data.reference}: "
            f"customer={customer_email_sent}, admin={admin_email_sent}"
        )
        return NotificationResult(
            customer_email_sent=customer_email_sent, admin_email_sent=admin_email_sent
        )
