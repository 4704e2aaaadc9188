"""
Paystack Data Models

Request and response payloads for the Paystack transaction API. Field names follow
Paystack's snake_case JSON; unknown fields are kept so verification payloads can be
passed through to the browser unchanged.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class PaystackModel(BaseModel):
    model_config = ConfigDict(extra="allow")


class PaymentMetadataPayload(PaystackModel):
    """Metadata attached to a Paystack transaction."""

    documentId: str
    documentTitle: str
    customerName: str
    customerPhone: Optional[str] = None


class PaymentData(BaseModel):
    """Body of POST /transaction/initialize."""

    email: str
    amount: int = Field(..., gt=0, description="Amount in cents")
    currency: str
    reference: str
    callback_url: Optional[str] = None
    metadata: Optional[PaymentMetadataPayload] = None


class InitializationData(PaystackModel):
    authorization_url: str
    access_code: str
    reference: str


class PaystackInitializationResponse(PaystackModel):
    """Response of POST /transaction/initialize."""

    status: bool
    message: str
    data: InitializationData


class PaystackTransactionCustomer(PaystackModel):
    id: Optional[int] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    customer_code: Optional[str] = None
    phone: Optional[str] = None


class VerificationData(PaystackModel):
    id: Optional[int] = None
    domain: Optional[str] = None
    status: str
    reference: str
    amount: int
    message: Optional[str] = None
    gateway_response: Optional[str] = None
    paid_at: Optional[str] = None
    created_at: Optional[str] = None
    channel: Optional[str] = None
    currency: Optional[str] = None
    ip_address: Optional[str] = None
    metadata: Optional[Any] = None
    customer: PaystackTransactionCustomer = Field(
        default_factory=PaystackTransactionCustomer
    )


class PaystackVerificationResponse(PaystackModel):
    """Response of GET /transaction/verify/:reference."""

    status: bool
    message: str
    data: VerificationData

    def to_payload(self) -> Dict[str, Any]:
        """The verification payload as returned by Paystack."""
        return self.model_dump(mode="json")
