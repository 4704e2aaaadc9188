"""
Shared Data Models

This module contains shared Pydantic base classes and enumerations that are used
across the payment, customer and logging collections.
"""

from datetime import datetime
from enum import Enum

from google.cloud.firestore import DocumentReference
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class FirestoreBaseModel(BaseModel):
    """Base model for all Firestore documents with common configuration."""

    model_config = ConfigDict(
        # Firestore field names are camelCase, Python attributes are snake_case
        alias_generator=to_camel,
        # Allow population by field name or alias
        populate_by_name=True,
        # Convert datetime objects to timestamps for Firestore
        json_encoders={
            datetime: lambda dt: dt,  # Firestore handles datetime conversion
            DocumentReference: lambda ref: ref.path,  # Convert refs to paths
        },
        # Validate assignments
        validate_assignment=True,
        # Use enum values instead of names
        use_enum_values=True,
    )

    def to_firestore(self) -> dict:
        """Dump the model using Firestore field names, dropping unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True)


# Enums
class PaymentStatus(str, Enum):
    """Payment status enumeration."""

    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"
    ABANDONED = "abandoned"


class DocumentCategory(str, Enum):
    """Legal document category enumeration."""

    PROPERTY = "property"
    ESTATE = "estate"
    OTHER = "other"


class PaymentSource(str, Enum):
    """Where a purchase was started from."""

    WEB = "web"
    MOBILE = "mobile"
    API = "api"


class PaymentErrorType(str, Enum):
    """Payment error category enumeration."""

    INITIALIZATION = "initialization"
    VERIFICATION = "verification"
    DATABASE = "database"
    UNKNOWN = "unknown"
