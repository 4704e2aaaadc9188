"""
Payment Workflow

Sequences the document purchase: initialize with Paystack, save the pending record,
verify the transaction, update the record, send notifications and gate downloads.

Only the primary outcome of each step (the gateway call, the payment status) is
raised to the caller. Persistence, logging and email side effects are best-effort.
"""

import asyncio
import logging
import os
import re
from datetime import datetime
from traceback import format_exc
from typing import Any, Callable, Optional

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from app.models.checkout import (
    ClientInfo,
    DownloadTicket,
    InitializePaymentRequest,
    SavePaymentRequest,
    SavePaymentResult,
    VerificationOutcome,
)
from app.models.documents import (
    DOCUMENT_FORMAT,
    DocumentCatalogEntry,
    get_catalog_entry,
)
from app.models.notifications import PaymentNotificationData
from app.models.payments import (
    BasePaymentRecord,
    PaymentMetadata,
    PaymentRecordUpdate,
    PaystackCustomer,
    PaystackData,
)
from app.models.paystack import (
    PaymentMetadataPayload,
    PaystackInitializationResponse,
    PaystackVerificationResponse,
)
from app.models.shared import PaymentErrorType, PaymentSource, PaymentStatus
from app.services.email.service import EmailService
from app.services.exceptions import (
    DocumentNotReadyError,
    ForbiddenError,
    GatewayError,
    NotFoundError,
    ValidationError,
)
from app.services.firestore_service import utc_now
from app.services.payments.paystack import (
    PaystackClient,
    extract_price_from_string,
    from_minor_units,
    to_minor_units,
)
from app.services.payments.record_store import PaymentRecordStore
from app.services.payments.reference import generate_payment_reference

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

_EMAIL_ADAPTER = TypeAdapter(EmailStr)


def sanitize_filename(title: str, extension: str = "zip") -> str:
    """'Last Will & Testament' -> 'Last_Will_Testament.zip'"""
    cleaned = re.sub(r"[^a-zA-Z0-9\s]", "", title)
    cleaned = re.sub(r"\s+", "_", cleaned.strip())
    return f"{cleaned or 'document'}.{extension}"


def _is_positive_number(value) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and value > 0
    )


def validate_customer_email(email: str) -> str:
    """Normalized email address, or ValidationError if it is malformed."""
    try:
        return _EMAIL_ADAPTER.validate_python(email)
    except PydanticValidationError:
        raise ValidationError("Invalid email format")


def validate_catalog_purchase(
    document_id: str, document_title: str, document_price: Any
) -> DocumentCatalogEntry:
    """
    Check a purchase against the catalog.

    The catalog is the only source of what is charged and delivered, so the
    requested title and price must match the listed entry exactly.

    Raises:
        ValidationError: If the document is unknown or its title or price differ
    """
    if not _is_positive_number(document_price):
        raise ValidationError("Document price must be a positive number")

    entry = get_catalog_entry(document_id)
    if entry is None:
        raise ValidationError(f"Unknown document: {document_id}")

    if document_price != entry.price:
        logger.warning(
            f"Rejected price for document {entry.id}: "
            f"R{document_price} requested, R{entry.price} listed"
        )
        raise ValidationError("Document price does not match the catalog")

    if document_title.strip() != entry.title:
        logger.warning(
            f"Rejected title for document {entry.id}: '{document_title}' requested"
        )
        raise ValidationError("Document title does not match the catalog")

    return entry


class PaymentWorkflow:
    """Orchestrates one document purchase end to end."""

    def __init__(
        self,
        paystack: PaystackClient,
        record_store: PaymentRecordStore,
        email_service: EmailService,
        base_url: str,
        documents_dir: str,
        currency: str = "ZAR",
        reference_factory: Callable[[], str] = generate_payment_reference,
    ):
        self.paystack = paystack
        self.record_store = record_store
        self.email_service = email_service
        self.base_url = base_url.rstrip("/")
        self.documents_dir = documents_dir
        self.currency = currency
        self.reference_factory = reference_factory

    def callback_url(self, reference: str) -> str:
        return f"{self.base_url}/payment/verify?reference={reference}"

    # ==================== INITIALIZE ====================

    def _validate_initialize(
        self, request: InitializePaymentRequest
    ) -> DocumentCatalogEntry:
        if not all(
            [
                request.document_id,
                request.document_title,
                request.document_price,
                request.customer_name,
                request.customer_email,
            ]
        ):
            raise ValidationError(
                "Missing required fields: documentId, documentTitle, documentPrice, "
                "customerName, customerEmail"
            )

        validate_customer_email(request.customer_email)
        return validate_catalog_purchase(
            request.document_id, request.document_title, request.document_price
        )

    async def initialize(
        self, request: InitializePaymentRequest, client_info: ClientInfo
    ) -> PaystackInitializationResponse:
        """
        Start a purchase and return the Paystack authorization URL.

        The amount charged is the catalog price of the document.

        Raises:
            ValidationError: If the purchase details are incomplete or invalid
            GatewayError: If Paystack rejects the initialization
        """
        entry = self._validate_initialize(request)

        reference = self.reference_factory()
        try:
            response = await asyncio.to_thread(
                self.paystack.initialize,
                customer_email=request.customer_email,
                amount_minor_units=to_minor_units(entry.price),
                currency=self.currency,
                reference=reference,
                callback_url=self.callback_url(reference),
                metadata=PaymentMetadataPayload(
                    documentId=entry.id,
                    documentTitle=entry.title,
                    customerName=request.customer_name,
                    customerPhone=request.customer_phone,
                ),
            )
        except GatewayError as e:
            await self.record_store.log_payment_error(
                error_type=PaymentErrorType.INITIALIZATION,
                error_message="Payment initialization failed",
                error_details=e.upstream_body or e.message,
                payment_reference=reference,
                customer_email=request.customer_email,
                document_id=entry.id,
            )
            raise

        if await self.record_store.has_customer_purchased_document(
            request.customer_email, entry.id
        ):
            logger.info(f"{request.customer_email} already owns document {entry.id}")

        # Persisting the pending record must not block the redirect to Paystack
        save_request = SavePaymentRequest(
            **request.model_dump(),
            payment_reference=response.data.reference,
            authorization_url=response.data.authorization_url,
            access_code=response.data.access_code,
        )
        try:
            await self.save(save_request, client_info)
        except Exception as e:
            logger.warning(
                f"Failed to save payment data for {response.data.reference}, "
                f"continuing with payment flow: {str(e)}"
            )

        logger.info(
            f"Payment initialized: {response.data.reference} "
            f"(R{entry.price} {self.currency}, {request.customer_email}, {entry.title})"
        )
        return response

    # ==================== SAVE ====================

    async def save(
        self, request: SavePaymentRequest, client_info: ClientInfo
    ) -> SavePaymentResult:
        """
        Persist the pending payment record.

        Raises:
            ValidationError: If fields are missing, the email is malformed or the
                document does not match the catalog
            StoreError: If the record could not be written
        """
        if not all(
            [
                request.payment_reference,
                request.document_id,
                request.document_title,
                request.document_price,
                request.customer_name,
                request.customer_email,
            ]
        ):
            raise ValidationError("Missing required fields")

        customer_email = validate_customer_email(request.customer_email)

        price = request.document_price
        if isinstance(price, str):
            price = extract_price_from_string(price)
        entry = validate_catalog_purchase(
            request.document_id, request.document_title, price
        )

        now = utc_now()
        payment = BasePaymentRecord(
            payment_reference=request.payment_reference,
            customer_name=request.customer_name,
            customer_email=customer_email,
            customer_phone=request.customer_phone,
            document_id=entry.id,
            document_title=entry.title,
            document_category=entry.category.value,
            document_price=entry.price,
            document_format=DOCUMENT_FORMAT,
            payment_status=PaymentStatus.PENDING,
            amount=to_minor_units(entry.price),
            currency=self.currency,
            paystack_data=PaystackData(
                authorization_url=request.authorization_url,
                access_code=request.access_code,
                channel="unknown",
                domain=self.paystack.domain,
            ),
            metadata=PaymentMetadata(
                user_agent=client_info.user_agent,
                ip_address=client_info.ip_address,
                source=PaymentSource.WEB,
                disclaimer_accepted=True,
                disclaimer_accepted_at=now,
            ),
        )

        firestore_id = await self.record_store.create_payment_record(payment)
        return SavePaymentResult(
            firestore_id=firestore_id, payment_reference=request.payment_reference
        )

    # ==================== VERIFY ====================

    async def verify(self, reference: Optional[str]) -> VerificationOutcome:
        """
        Verify a transaction and apply its result.

        The returned outcome always carries the raw verification; failures while
        updating the record or sending emails only show up in its flags. Emails go
        out only once the record is stored as success, so the download link works.

        Raises:
            ValidationError: If no reference is given
            GatewayError: If Paystack verification fails
        """
        if not reference or not reference.strip():
            raise ValidationError("Payment reference is required")
        reference = reference.strip()

        try:
            verification = await asyncio.to_thread(self.paystack.verify, reference)
        except GatewayError as e:
            await self.record_store.log_payment_error(
                error_type=PaymentErrorType.VERIFICATION,
                error_message="Payment verification failed",
                error_details=e.upstream_body or e.message,
                payment_reference=reference,
            )
            raise

        outcome = VerificationOutcome(verification=verification)

        try:
            await self.record_store.update_payment_record(
                reference, self._verification_update(verification)
            )
            outcome.record_updated = True
            logger.info(f"Payment verification saved: {reference}")
        except Exception as e:
            logger.warning(
                f"Failed to save verification for {reference} (non-blocking): {str(e)}"
            )

        if verification.data.status != PaymentStatus.SUCCESS.value:
            logger.info(
                f"Payment {reference} not successful ({verification.data.status}), "
                f"skipping emails"
            )
        elif not outcome.record_updated:
            logger.error(
                f"Payment {reference} succeeded but its record was not updated, "
                f"skipping emails"
            )
        else:
            outcome.notifications = await self._notify(reference)

        logger.info(
            f"Payment verification result: {reference} status={verification.data.status} "
            f"amount={verification.data.amount} {verification.data.currency} "
            f"gateway_response={verification.data.gateway_response}"
        )
        return outcome

    def _verification_update(
        self, verification: PaystackVerificationResponse
    ) -> PaymentRecordUpdate:
        data = verification.data
        return PaymentRecordUpdate(
            payment_status=PaymentStatus(data.status),
            amount=data.amount,
            gateway_response=data.gateway_response,
            paystack_transaction_id=data.id,
            paystack_data=PaystackData(
                channel=data.channel, domain=data.domain, ip_address=data.ip_address
            ),
            paystack_customer=PaystackCustomer(
                id=data.customer.id,
                customer_code=data.customer.customer_code,
                first_name=data.customer.first_name,
                last_name=data.customer.last_name,
            ),
        )

    async def _notify(self, reference: str):
        try:
            payment = await self.record_store.get_payment_by_reference(reference)
            if payment is None:
                logger.error(f"No payment record found for email sending: {reference}")
                return None

            return await self.email_service.send_payment_notification_emails(
                PaymentNotificationData(
                    customer_name=payment.customer_name,
                    customer_email=payment.customer_email,
                    customer_phone=payment.customer_phone,
                    document_title=payment.document_title,
                    document_category=payment.document_category,
                    document_id=payment.document_id,
                    amount=payment.document_price or from_minor_units(payment.amount),
                    reference=payment.payment_reference,
                    payment_date=payment.paid_at or datetime.now(),
                )
            )
        except Exception as e:
            logger.error(
                f"Email sending error for {reference} (non-blocking): {str(e)}\n{format_exc()}"
            )
            return None

    # ==================== DOWNLOAD ====================

    async def prepare_download(self, reference: Optional[str]) -> DownloadTicket:
        """
        Resolve the archive for a paid reference.

        Raises:
            ValidationError: If no reference is given
            NotFoundError: If the payment or its catalog entry is unknown
            ForbiddenError: If the payment did not succeed
            DocumentNotReadyError: If the archive is not on disk yet
        """
        if not reference or not reference.strip():
            raise ValidationError("Payment reference is required")

        payment = await self.record_store.get_payment_by_reference(reference)
        if payment is None:
            raise NotFoundError("Payment record not found")

        if payment.payment_status != PaymentStatus.SUCCESS:
            raise ForbiddenError("Payment not completed successfully")

        entry = get_catalog_entry(payment.document_id)
        if entry is None:
            raise NotFoundError("Document files not found")

        file_path = os.path.join(self.documents_dir, entry.archive)
        if not os.path.isfile(file_path):
            logger.error(f"Document file not found: {file_path}")
            raise DocumentNotReadyError(
                "Document file not available yet. We are preparing your document and "
                "will email it to you shortly. Please contact support if you need "
                "immediate assistance.",
                reference=reference,
                document_title=payment.document_title,
            )

        return DownloadTicket(
            record=payment,
            file_path=file_path,
            filename=sanitize_filename(payment.document_title),
        )

    async def record_download(
        self, ticket: DownloadTicket, client_info: ClientInfo
    ) -> bool:
        logged = await self.record_store.record_document_download(
            payment_reference=ticket.record.payment_reference,
            customer_email=ticket.record.customer_email,
            document_id=ticket.record.document_id,
            ip_address=client_info.ip_address,
            user_agent=client_info.user_agent or "unknown",
        )
        logger.info(
            f"Document download served: {ticket.record.payment_reference} "
            f"({ticket.record.customer_email}, {ticket.filename})"
        )
        return logged
