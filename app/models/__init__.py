"""
Models Package

This package contains database schema and API models organized by domain:
- payments.py: Payment record, download log and payment error models
- customers.py: Customer aggregate models
- documents.py: The document catalog
- paystack.py: Paystack request/response payloads
- checkout.py: Payment endpoint requests and workflow results
- notifications.py: Email payloads and results
- shared.py: Common base models and enumerations
"""

# Import all models for easy access
from app.models.customers import Customer, CustomerPreferences
from app.models.documents import DOCUMENT_CATALOG, DocumentCatalogEntry
from app.models.payments import (
    BasePaymentRecord,
    DocumentDownload,
    PaymentError,
    PaymentMetadata,
    PaymentRecord,
    PaymentRecordUpdate,
    PaymentStatistics,
    PaystackCustomer,
    PaystackData,
)
from app.models.shared import (
    DocumentCategory,
    FirestoreBaseModel,
    PaymentErrorType,
    PaymentSource,
    PaymentStatus,
)

# Firestore collection names
PAYMENTS_COLLECTION = "payments"
CUSTOMERS_COLLECTION = "customers"
DOWNLOADS_COLLECTION = "document_downloads"
ERRORS_COLLECTION = "payment_errors"

# Collection model mappings for Firestore operations
COLLECTION_MODELS = {
    PAYMENTS_COLLECTION: PaymentRecord,
    CUSTOMERS_COLLECTION: Customer,
    DOWNLOADS_COLLECTION: DocumentDownload,
    ERRORS_COLLECTION: PaymentError,
}

__all__ = [
    "BasePaymentRecord",
    "COLLECTION_MODELS",
    "CUSTOMERS_COLLECTION",
    "Customer",
    "CustomerPreferences",
    "DOCUMENT_CATALOG",
    "DOWNLOADS_COLLECTION",
    "DocumentCatalogEntry",
    "DocumentCategory",
    "DocumentDownload",
    "ERRORS_COLLECTION",
    "FirestoreBaseModel",
    "PAYMENTS_COLLECTION",
    "PaymentError",
    "PaymentErrorType",
    "PaymentMetadata",
    "PaymentRecord",
    "PaymentRecordUpdate",
    "PaymentSource",
    "PaymentStatistics",
    "PaymentStatus",
    "PaystackCustomer",
    "PaystackData",
]
