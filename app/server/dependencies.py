"""
Service providers for FastAPI dependency injection.

Each provider builds its service once per process from config. Tests replace them
through ``app.dependency_overrides``.
"""

import secrets
from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException, Request

from app.models.checkout import ClientInfo
from app.services.email.service import EmailService, EmailSettings
from app.services.firestore_service import get_firestore_service
from app.services.payments.paystack import PaystackClient
from app.services.payments.record_store import PaymentRecordStore
from app.services.payments.workflow import PaymentWorkflow
from config import (
    ADMIN_API_KEY,
    BASE_URL,
    DOCUMENTS_DIR,
    EMAIL_ADMIN,
    EMAIL_FROM,
    EMAIL_FROM_NAME,
    EMAIL_REPLY_TO,
    FIRESTORE_DATABASE,
    PAYSTACK_BASE_URL,
    PAYSTACK_CURRENCY,
    PAYSTACK_PUBLIC_KEY,
    PAYSTACK_SECRET_KEY,
    RESEND_API_KEY,
    RESEND_BASE_URL,
)


@lru_cache
def get_paystack_client() -> PaystackClient:
    return PaystackClient(
        secret_key=PAYSTACK_SECRET_KEY,
        public_key=PAYSTACK_PUBLIC_KEY,
        base_url=PAYSTACK_BASE_URL,
    )


@lru_cache
def get_record_store() -> PaymentRecordStore:
    return PaymentRecordStore(get_firestore_service(FIRESTORE_DATABASE))


@lru_cache
def get_email_service() -> EmailService:
    return EmailService(
        api_key=RESEND_API_KEY,
        site_base_url=BASE_URL,
        settings=EmailSettings(
            from_address=EMAIL_FROM,
            from_name=EMAIL_FROM_NAME,
            admin_address=EMAIL_ADMIN,
            reply_to=EMAIL_REPLY_TO,
        ),
        base_url=RESEND_BASE_URL,
    )


@lru_cache
def get_payment_workflow() -> PaymentWorkflow:
    return PaymentWorkflow(
        paystack=get_paystack_client(),
        record_store=get_record_store(),
        email_service=get_email_service(),
        base_url=BASE_URL,
        documents_dir=DOCUMENTS_DIR,
        currency=PAYSTACK_CURRENCY,
    )


def get_client_info(request: Request) -> ClientInfo:
    """Extract user agent and client IP, preferring proxy headers."""
    ip_address = (
        request.headers.get("x-forwarded-for")
        or request.headers.get("x-real-ip")
        or "unknown"
    )
    return ClientInfo(
        user_agent=request.headers.get("user-agent"), ip_address=ip_address
    )


def get_admin_api_key() -> str:
    return ADMIN_API_KEY


def verify_admin_key(
    expected_key: Annotated[str, Depends(get_admin_api_key)],
    x_admin_key: Annotated[Optional[str], Header()] = None,
) -> None:
    """Reject admin requests without the configured ``X-Admin-Key`` header."""
    if not expected_key:
        raise HTTPException(status_code=503, detail="Admin API is not configured")
    if not x_admin_key or not secrets.compare_digest(x_admin_key, expected_key):
        raise HTTPException(status_code=401, detail="Invalid admin key")
