"""
Notification Models

Inputs for the customer and admin emails sent after a successful payment.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CustomerEmailData(BaseModel):
    customer_name: str
    customer_email: str
    document_title: str
    amount: float  # Rand
    reference: str
    download_url: str


class AdminEmailData(BaseModel):
    customer_name: str
    customer_email: str
    customer_phone: Optional[str] = None
    document_title: str
    document_category: str
    amount: float  # Rand
    reference: str
    payment_date: str


class PaymentNotificationData(BaseModel):
    """Details of a successful payment used to build both emails."""

    customer_name: str
    customer_email: str
    customer_phone: Optional[str] = None
    document_title: str
    document_category: str
    document_id: str
    amount: float  # Rand
    reference: str
    payment_date: datetime


class NotificationResult(BaseModel):
    """Independent outcome of the two notification emails."""

    model_config = ConfigDict(populate_by_name=True)

    customer_email_sent: bool = Field(False, alias="customerEmailSent")
    admin_email_sent: bool = Field(False, alias="adminEmailSent")
