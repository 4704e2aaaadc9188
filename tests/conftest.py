"""
Pytest configuration.

Services are built on in-memory fakes and injected into the FastAPI app through
dependency overrides, so no test touches Paystack, Firestore or Resend.
"""

import os

os.environ.setdefault("AKALAW_ENV", "d")

import pytest
from fastapi.testclient import TestClient

from app.server.dependencies import (
    get_admin_api_key,
    get_payment_workflow,
    get_record_store,
)
from app.server.main import app
from app.services.email.service import EmailService
from app.services.firestore_service import FirestoreService
from app.services.payments.record_store import PaymentRecordStore
from app.services.payments.workflow import PaymentWorkflow
from tests.fakes import (
    ADMIN_KEY,
    BASE_URL,
    FakeFirestoreClient,
    FakePaystackClient,
    FakeSession,
)


@pytest.fixture
def firestore_client():
    return FakeFirestoreClient()


@pytest.fixture
def record_store(firestore_client):
    return PaymentRecordStore(FirestoreService(client=firestore_client))


@pytest.fixture
def paystack():
    return FakePaystackClient()


@pytest.fixture
def email_session():
    return FakeSession()


@pytest.fixture
def email_service(email_session):
    return EmailService(
        api_key="re_test_key", site_base_url=BASE_URL, session=email_session
    )


@pytest.fixture
def documents_dir(tmp_path):
    directory = tmp_path / "documents"
    directory.mkdir()
    return directory


@pytest.fixture
def workflow(paystack, record_store, email_service, documents_dir):
    return PaymentWorkflow(
        paystack=paystack,
        record_store=record_store,
        email_service=email_service,
        base_url=BASE_URL,
        documents_dir=str(documents_dir),
    )


@pytest.fixture
def test_client(workflow, record_store):
    app.dependency_overrides[get_payment_workflow] = lambda: workflow
    app.dependency_overrides[get_record_store] = lambda: record_store
    app.dependency_overrides[get_admin_api_key] = lambda: ADMIN_KEY
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def purchase_payload():
    return {
        "documentId": "2",
        "documentTitle": "Last Will & Testament",
        "documentPrice": 550,
        "customerName": "A",
        "customerEmail": "a@b.com",
    }
