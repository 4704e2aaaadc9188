"""
Payment Record Store

This module manages payment records, customer aggregates, download logs and payment
error logs in Firestore. Secondary writes (customer aggregates, download and error
logs) are best-effort and never raise.
"""

import logging
from datetime import timedelta
from traceback import format_exc
from typing import Any, Dict, List, Optional

from app.models import (
    CUSTOMERS_COLLECTION,
    DOWNLOADS_COLLECTION,
    ERRORS_COLLECTION,
    PAYMENTS_COLLECTION,
)
from app.models.customers import Customer, CustomerPreferences
from app.models.payments import (
    BasePaymentRecord,
    DocumentDownload,
    PaymentError,
    PaymentRecord,
    PaymentRecordUpdate,
    PaymentStatistics,
)
from app.models.shared import PaymentErrorType, PaymentStatus
from app.services.exceptions import NotFoundError, StoreError
from app.services.firestore_service import FirestoreService, utc_now

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Sub-records merged field by field on update
MERGED_SUB_RECORDS = ("paystackData", "paystackCustomer")


def _flatten_update(update_data: Dict[str, Any]) -> Dict[str, Any]:
    """Turn sub-record maps into dotted field paths so existing keys are kept."""
    flattened = {}
    for key, value in update_data.items():
        if key in MERGED_SUB_RECORDS and isinstance(value, dict):
            for sub_key, sub_value in value.items():
                flattened[f"{key}.{sub_key}"] = sub_value
        else:
            flattened[key] = value
    return flattened


class PaymentRecordStore:
    """Firestore-backed storage for payments, customers, downloads and errors."""

    def __init__(self, firestore_service: FirestoreService):
        self.firestore_service = firestore_service

    # ==================== PAYMENTS ====================

    async def create_payment_record(self, payment: BasePaymentRecord) -> str:
        """
        Create the initial payment record when a payment is initialized.

        The status is always stored as pending regardless of the input.

        Returns:
            The Firestore document ID

        Raises:
            StoreError: If the record could not be written
        """
        now = utc_now()
        payment_data = payment.to_firestore()
        payment_data.pop("id", None)
        payment_data.pop("paidAt", None)
        payment_data["paymentStatus"] = PaymentStatus.PENDING.value
        payment_data["createdAt"] = now
        payment_data["updatedAt"] = now

        try:
            document_id = await self.firestore_service.create_document(
                collection_name=PAYMENTS_COLLECTION, document_data=payment_data
            )
        except Exception as e:
            logger.error(f"Failed to create payment record: {str(e)}\n{format_exc()}")
            await self.log_payment_error(
                error_type=PaymentErrorType.DATABASE,
                error_message="Failed to create payment record",
                error_details=str(e),
                payment_reference=payment.payment_reference,
                customer_email=payment.customer_email,
                document_id=payment.document_id,
            )
            raise StoreError("Failed to save payment data") from e

        logger.info(
            f"Payment record {document_id} created for {payment.payment_reference} "
            f"({payment.customer_email}, R{payment.document_price})"
        )
        return document_id

    async def update_payment_record(
        self, payment_reference: str, update: PaymentRecordUpdate
    ) -> PaymentRecord:
        """
        Update a payment record after verification.

        ``paidAt`` is stamped only when the new status is success and the stored
        record has none yet. A transition into success also upserts the customer
        aggregate; failures there are recorded but not raised.

        Returns:
            The payment record as it was before the update

        Raises:
            NotFoundError: If no record matches the reference
            StoreError: If the record could not be read or written
        """
        try:
            payment = await self._find_payment(payment_reference)
        except Exception as e:
            logger.error(f"Failed to look up payment record: {str(e)}\n{format_exc()}")
            await self.log_payment_error(
                error_type=PaymentErrorType.DATABASE,
                error_message="Failed to update payment record",
                error_details=str(e),
                payment_reference=payment_reference,
            )
            raise StoreError("Failed to update payment record") from e

        if payment is None:
            await self.log_payment_error(
                error_type=PaymentErrorType.DATABASE,
                error_message="Failed to update payment record",
                error_details=f"Payment record not found for reference: {payment_reference}",
                payment_reference=payment_reference,
            )
            raise NotFoundError(
                f"Payment record not found for reference: {payment_reference}"
            )

        update_data = update.to_firestore()
        update_data.pop("paidAt", None)
        is_success = update.payment_status == PaymentStatus.SUCCESS
        if is_success and payment.paid_at is None:
            update_data["paidAt"] = utc_now()

        try:
            await self.firestore_service.update_document(
                collection_name=PAYMENTS_COLLECTION,
                document_id=payment.id,
                update_data=_flatten_update(update_data),
            )
        except Exception as e:
            logger.error(f"Failed to update payment record: {str(e)}\n{format_exc()}")
            await self.log_payment_error(
                error_type=PaymentErrorType.DATABASE,
                error_message="Failed to update payment record",
                error_details=str(e),
                payment_reference=payment_reference,
            )
            raise StoreError("Failed to update payment record") from e

        logger.info(
            f"Payment record {payment.id} updated for {payment_reference}: "
            f"status={update.payment_status}"
        )

        if is_success and payment.payment_status != PaymentStatus.SUCCESS:
            await self.update_customer_record(payment)

        return payment

    async def _find_payment(self, payment_reference: str) -> Optional[PaymentRecord]:
        payments = await self.firestore_service.query_collection(
            collection_name=PAYMENTS_COLLECTION,
            filters=[("paymentReference", "==", payment_reference)],
            limit=1,
            model_class=PaymentRecord,
        )
        return payments[0] if payments else None

    async def get_payment_by_reference(
        self, payment_reference: str
    ) -> Optional[PaymentRecord]:
        """Get a payment record by reference; None if missing or unreadable."""
        try:
            return await self._find_payment(payment_reference)
        except Exception as e:
            logger.error(
                f"Failed to fetch payment record {payment_reference}: {str(e)}\n{format_exc()}"
            )
            return None

    async def get_customer_payments(
        self, customer_email: str, limit: int = 50
    ) -> List[PaymentRecord]:
        """Get a customer's payment history, newest first."""
        try:
            return await self.firestore_service.query_collection(
                collection_name=PAYMENTS_COLLECTION,
                filters=[("customerEmail", "==", customer_email)],
                order_by="createdAt",
                descending=True,
                limit=limit,
                model_class=PaymentRecord,
            )
        except Exception as e:
            logger.error(
                f"Failed to fetch payments for {customer_email}: {str(e)}\n{format_exc()}"
            )
            return []

    async def has_customer_purchased_document(
        self, customer_email: str, document_id: str
    ) -> bool:
        """Check whether a customer already paid for a document."""
        try:
            payments = await self.firestore_service.query_collection(
                collection_name=PAYMENTS_COLLECTION,
                filters=[
                    ("customerEmail", "==", customer_email),
                    ("documentId", "==", document_id),
                    ("paymentStatus", "==", PaymentStatus.SUCCESS.value),
                ],
                limit=1,
            )
            return len(payments) > 0
        except Exception as e:
            logger.error(f"Failed to check document purchase: {str(e)}\n{format_exc()}")
            return False

    async def get_payment_statistics(self, days: int = 30) -> PaymentStatistics:
        """Aggregate payment figures for the last ``days`` days."""
        try:
            cutoff = utc_now() - timedelta(days=days)
            payments = await self.firestore_service.query_collection(
                collection_name=PAYMENTS_COLLECTION,
                filters=[("createdAt", ">=", cutoff)],
                model_class=PaymentRecord,
            )
        except Exception as e:
            logger.error(f"Failed to fetch payment statistics: {str(e)}\n{format_exc()}")
            return PaymentStatistics()

        successful = [p for p in payments if p.payment_status == PaymentStatus.SUCCESS]
        total_revenue = sum(p.document_price for p in successful)
        return PaymentStatistics(
            total_payments=len(payments),
            successful_payments=len(successful),
            total_revenue=total_revenue,
            average_order_value=total_revenue / len(successful) if successful else 0,
        )

    # ==================== CUSTOMERS ====================

    async def update_customer_record(self, payment: BasePaymentRecord) -> bool:
        """
        Create or update the customer aggregate for a successful payment.

        Returns:
            True if the aggregate was written. Failures are logged and recorded in
            the payment_errors collection for follow-up, never raised.
        """
        try:
            customers = await self.firestore_service.query_collection(
                collection_name=CUSTOMERS_COLLECTION,
                filters=[("email", "==", payment.customer_email)],
                limit=1,
                model_class=Customer,
            )
            now = utc_now()

            if not customers:
                customer = Customer(
                    email=payment.customer_email,
                    name=payment.customer_name,
                    phone=payment.customer_phone,
                    total_purchases=1,
                    total_spent=payment.document_price,
                    first_purchase_at=now,
                    last_purchase_at=now,
                    purchased_documents=[payment.document_id],
                    preferences=CustomerPreferences(),
                    created_at=now,
                    updated_at=now,
                )
                customer_data = customer.to_firestore()
                customer_data.pop("id", None)
                await self.firestore_service.create_document(
                    collection_name=CUSTOMERS_COLLECTION, document_data=customer_data
                )
                logger.info(f"New customer created: {payment.customer_email}")
            else:
                customer = customers[0]
                purchased_documents = list(customer.purchased_documents)
                if payment.document_id not in purchased_documents:
                    purchased_documents.append(payment.document_id)

                await self.firestore_service.increment_document(
                    collection_name=CUSTOMERS_COLLECTION,
                    document_id=customer.id,
                    increments={
                        "totalPurchases": 1,
                        "totalSpent": payment.document_price,
                    },
                    update_data={
                        "name": payment.customer_name,
                        "phone": payment.customer_phone or customer.phone,
                        "lastPurchaseAt": now,
                        "purchasedDocuments": purchased_documents,
                    },
                )
                logger.info(f"Customer updated: {payment.customer_email}")

            return True

        except Exception as e:
            logger.error(
                f"Failed to update customer record for {payment.customer_email}: "
                f"{str(e)}\n{format_exc()}"
            )
            await self.log_payment_error(
                error_type=PaymentErrorType.DATABASE,
                error_message="Failed to update customer record",
                error_details=str(e),
                payment_reference=payment.payment_reference,
                customer_email=payment.customer_email,
                document_id=payment.document_id,
            )
            return False

    # ==================== DOWNLOADS ====================

    async def record_document_download(
        self,
        payment_reference: str,
        customer_email: str,
        document_id: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> bool:
        """Append a download log entry. Never raises."""
        try:
            download = DocumentDownload(
                payment_reference=payment_reference,
                customer_email=customer_email,
                document_id=document_id,
                downloaded_at=utc_now(),
                ip_address=ip_address,
                user_agent=user_agent,
            )
            await self.firestore_service.create_document(
                collection_name=DOWNLOADS_COLLECTION,
                document_data=download.to_firestore(),
            )
            logger.info(f"Download recorded: {payment_reference} ({document_id})")
            return True
        except Exception as e:
            logger.error(f"Failed to record download: {str(e)}\n{format_exc()}")
            return False

    # ==================== ERRORS ====================

    async def log_payment_error(
        self,
        error_type: PaymentErrorType,
        error_message: str,
        error_details: Optional[str] = None,
        payment_reference: Optional[str] = None,
        customer_email: Optional[str] = None,
        document_id: Optional[str] = None,
    ) -> bool:
        """Append a payment error entry for debugging. Never raises."""
        try:
            error = PaymentError(
                error_type=error_type,
                error_message=error_message,
                error_details=error_details,
                payment_reference=payment_reference,
                customer_email=customer_email,
                document_id=document_id,
                resolved=False,
                created_at=utc_now(),
            )
            await self.firestore_service.create_document(
                collection_name=ERRORS_COLLECTION, document_data=error.to_firestore()
            )
            logger.info(f"Payment error logged: {error.error_type} {error_message}")
            return True
        except Exception as e:
            logger.error(f"Failed to log payment error: {str(e)}")
            return False
