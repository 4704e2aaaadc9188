"""
Customer Data Models

One aggregate document per distinct customer email, upserted after every
successful payment.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field

from app.models.shared import FirestoreBaseModel


class CustomerPreferences(FirestoreBaseModel):
    """Marketing preferences embedded in customer records."""

    email_marketing: bool = Field(False, description="Opted into email marketing")
    sms_marketing: bool = Field(False, description="Opted into SMS marketing")


class Customer(FirestoreBaseModel):
    """Customer document model for the customers collection."""

    id: Optional[str] = Field(None, description="Firestore document ID")
    email: EmailStr = Field(..., description="Customer email address")
    name: str = Field(..., description="Most recent customer name")
    phone: Optional[str] = Field(None, description="Most recent phone number")

    # Purchase history
    total_purchases: int = Field(0, ge=0, description="Successful purchases")
    total_spent: float = Field(0, ge=0, description="Total spent in Rand")
    first_purchase_at: Optional[datetime] = None
    last_purchase_at: Optional[datetime] = None
    purchased_documents: List[str] = Field(
        default_factory=list, description="Purchased catalog document IDs"
    )

    preferences: CustomerPreferences = Field(default_factory=CustomerPreferences)

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
