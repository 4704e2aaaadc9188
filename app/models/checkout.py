"""
Checkout Models

Request bodies for the payment endpoints and the results returned by the
payment workflow. Request fields are optional on purpose: the workflow reports
missing fields with its own 400 messages rather than FastAPI's 422.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.notifications import NotificationResult
from app.models.payments import PaymentRecord
from app.models.paystack import PaystackVerificationResponse


class InitializePaymentRequest(BaseModel):
    """Body of POST /payment/initialize."""

    model_config = ConfigDict(populate_by_name=True)

    document_id: Optional[str] = Field(None, alias="documentId")
    document_title: Optional[str] = Field(None, alias="documentTitle")
    document_price: Optional[Any] = Field(None, alias="documentPrice")
    customer_name: Optional[str] = Field(None, alias="customerName")
    customer_email: Optional[str] = Field(None, alias="customerEmail")
    customer_phone: Optional[str] = Field(None, alias="customerPhone")

    @field_validator("document_id", mode="before")
    @classmethod
    def _document_id_as_string(cls, value: Any) -> Any:
        # The catalog UI sends numeric IDs
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class SavePaymentRequest(InitializePaymentRequest):
    """Body of POST /payment/save."""

    payment_reference: Optional[str] = Field(None, alias="paymentReference")
    authorization_url: Optional[str] = Field(None, alias="authorizationUrl")
    access_code: Optional[str] = Field(None, alias="accessCode")


class ClientInfo(BaseModel):
    """Request metadata recorded alongside payments and downloads."""

    user_agent: Optional[str] = None
    ip_address: str = "unknown"


class SavePaymentResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    firestore_id: str = Field(..., alias="firestoreId")
    payment_reference: str = Field(..., alias="paymentReference")


class VerificationOutcome(BaseModel):
    """Result of a verification, including what happened to its side effects."""

    verification: PaystackVerificationResponse
    record_updated: bool = False
    notifications: Optional[NotificationResult] = None


class DownloadTicket(BaseModel):
    """Everything needed to stream a purchased document."""

    record: PaymentRecord
    file_path: str
    filename: str
