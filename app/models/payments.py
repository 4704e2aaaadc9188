"""
Payment Data Models

This module contains models for payment records, download logs and payment errors.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from app.models.shared import (
    FirestoreBaseModel,
    PaymentErrorType,
    PaymentSource,
    PaymentStatus,
)


class PaystackData(FirestoreBaseModel):
    """Gateway details embedded in a payment record."""

    channel: Optional[str] = Field(None, description="Payment channel, e.g. card")
    authorization_url: Optional[str] = Field(None, description="Hosted payment URL")
    access_code: Optional[str] = Field(None, description="Paystack access code")
    domain: Optional[str] = Field(None, description="Paystack domain (test/live)")
    ip_address: Optional[str] = Field(None, description="Payer IP seen by Paystack")


class PaystackCustomer(FirestoreBaseModel):
    """Paystack's own customer record, set after verification."""

    id: Optional[int] = Field(None, description="Paystack customer ID")
    customer_code: Optional[str] = Field(None, description="Paystack customer code")
    first_name: Optional[str] = Field(None, description="First name")
    last_name: Optional[str] = Field(None, description="Last name")


class PaymentMetadata(FirestoreBaseModel):
    """Request metadata captured when the purchase is saved."""

    user_agent: Optional[str] = Field(None, description="Browser user agent")
    ip_address: Optional[str] = Field(None, description="Client IP address")
    source: PaymentSource = Field(PaymentSource.WEB, description="Purchase source")
    disclaimer_accepted: bool = Field(..., description="Legal disclaimer accepted")
    disclaimer_accepted_at: datetime = Field(
        ..., description="Disclaimer acceptance timestamp"
    )


class BasePaymentRecord(FirestoreBaseModel):
    """Base payment record model shared between Firestore and API."""

    payment_reference: str = Field(..., description="Generated payment reference")
    paystack_transaction_id: Optional[int] = Field(
        None, description="Paystack transaction ID"
    )

    # Customer information
    customer_name: str = Field(..., min_length=1, description="Customer name")
    customer_email: EmailStr = Field(..., description="Customer email address")
    customer_phone: Optional[str] = Field(None, description="Customer phone number")

    # Document information
    document_id: str = Field(..., description="Catalog document ID")
    document_title: str = Field(..., description="Document title")
    document_category: str = Field(..., description="Document category")
    document_price: float = Field(..., gt=0, description="Price in Rand")
    document_format: str = Field("PDF & Word", description="Delivered formats")

    # Payment details
    payment_status: PaymentStatus = Field(
        PaymentStatus.PENDING, description="Payment status"
    )
    amount: int = Field(..., ge=0, description="Payment amount in cents")
    currency: str = Field("ZAR", description="Payment currency code")
    gateway_response: Optional[str] = Field(
        None, description="Paystack gateway response message"
    )

    paystack_data: Optional[PaystackData] = None
    paystack_customer: Optional[PaystackCustomer] = None
    metadata: Optional[PaymentMetadata] = None

    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    paid_at: Optional[datetime] = Field(None, description="Payment success timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")


class PaymentRecord(BasePaymentRecord):
    """Payment record document model for the payments collection."""

    id: Optional[str] = Field(None, description="Firestore document ID")


class PaymentRecordUpdate(FirestoreBaseModel):
    """Partial update applied to a payment record after verification."""

    payment_status: Optional[PaymentStatus] = None
    amount: Optional[int] = None
    gateway_response: Optional[str] = None
    paystack_transaction_id: Optional[int] = None
    paystack_data: Optional[PaystackData] = None
    paystack_customer: Optional[PaystackCustomer] = None
    paid_at: Optional[datetime] = None


class DocumentDownload(FirestoreBaseModel):
    """Document download log entry for the document_downloads collection."""

    id: Optional[str] = None
    payment_reference: str
    customer_email: str
    document_id: str
    downloaded_at: datetime
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


class PaymentError(FirestoreBaseModel):
    """Diagnostic entry for the payment_errors collection."""

    id: Optional[str] = None
    error_type: PaymentErrorType = PaymentErrorType.UNKNOWN
    error_message: str
    error_details: Optional[str] = None
    payment_reference: Optional[str] = None
    customer_email: Optional[str] = None
    document_id: Optional[str] = None
    resolved: bool = False
    created_at: Optional[datetime] = None


class PaymentStatistics(BaseModel):
    """Aggregated payment figures over a time window."""

    total_payments: int = 0
    successful_payments: int = 0
    total_revenue: float = 0
    average_order_value: float = 0
