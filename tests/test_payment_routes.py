import asyncio
import threading

import pytest

from app.models.checkout import ClientInfo, InitializePaymentRequest
from app.server.dependencies import get_payment_workflow
from app.server.main import app
from app.services.payments.workflow import PaymentWorkflow, sanitize_filename
from tests.fakes import BASE_URL


def initialize(test_client, payload, **headers):
    return test_client.post("/payment/initialize", json=payload, headers=headers)


def test_root(test_client):
    response = test_client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "success"}


def test_documents_catalog(test_client):
    response = test_client.get("/payment/documents")

    assert response.status_code == 200
    documents = response.json()["data"]
    assert [(d["id"], d["price"], d["category"]) for d in documents] == [
        ("1", 450, "property"),
        ("2", 550, "estate"),
        ("3", 550, "estate"),
    ]


# ==================== INITIALIZE ====================


def test_initialize_creates_pending_record(
    test_client, purchase_payload, paystack, firestore_client
):
    response = initialize(
        test_client, purchase_payload, **{"x-forwarded-for": "41.0.0.9", "user-agent": "pytest"}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["status"] is True
    reference = body["data"]["reference"]
    assert body["data"]["authorization_url"].startswith("https://checkout.paystack.com/")

    (call,) = paystack.initialize_calls
    assert call["amount_minor_units"] == 55000
    assert call["currency"] == "ZAR"
    assert call["callback_url"] == f"{BASE_URL}/payment/verify?reference={reference}"
    assert call["metadata"].documentTitle == "Last Will & Testament"

    (stored,) = firestore_client.documents("payments")
    assert stored["paymentReference"] == reference
    assert stored["paymentStatus"] == "pending"
    assert stored["documentCategory"] == "estate"
    assert stored["documentPrice"] == 550
    assert stored["amount"] == 55000
    assert stored["currency"] == "ZAR"
    assert stored["documentFormat"] == "PDF & Word"
    assert stored["paystackData"]["accessCode"] == body["data"]["access_code"]
    assert stored["metadata"]["ipAddress"] == "41.0.0.9"
    assert stored["metadata"]["userAgent"] == "pytest"
    assert stored["metadata"]["disclaimerAccepted"] is True


def test_initialize_accepts_numeric_document_id(test_client, purchase_payload, firestore_client):
    purchase_payload["documentId"] = 2

    response = initialize(test_client, purchase_payload)

    assert response.status_code == 200
    assert firestore_client.documents("payments")[0]["documentId"] == "2"


@pytest.mark.parametrize(
    "field, value, message",
    [
        ("customerEmail", None, "Missing required fields"),
        ("documentTitle", "", "Missing required fields"),
        ("customerEmail", "not-an-email", "Invalid email format"),
        ("documentPrice", -5, "Document price must be a positive number"),
        ("documentPrice", "550", "Document price must be a positive number"),
        ("documentId", "99", "Unknown document: 99"),
        ("documentPrice", 1, "Document price does not match the catalog"),
        ("documentPrice", 1e308, "Document price does not match the catalog"),
        ("documentTitle", "Living Will", "Document title does not match the catalog"),
    ],
)
def test_initialize_rejects_invalid_input(
    test_client, purchase_payload, paystack, field, value, message
):
    purchase_payload[field] = value

    response = initialize(test_client, purchase_payload)

    assert response.status_code == 400
    assert response.json()["status"] is False
    assert response.json()["message"].startswith(message)
    assert paystack.initialize_calls == []


def test_malformed_body_is_a_400(test_client):
    response = test_client.post(
        "/payment/initialize",
        content="not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["status"] is False


def test_gateway_failure_hides_upstream_details(
    test_client, purchase_payload, paystack, firestore_client
):
    paystack.fail_initialize = True

    response = initialize(test_client, purchase_payload)

    assert response.status_code == 500
    assert response.json() == {"status": False, "message": "Failed to initialize payment"}
    assert "Invalid key" not in response.text
    assert firestore_client.documents("payments") == []
    (error,) = firestore_client.documents("payment_errors")
    assert error["errorType"] == "initialization"
    assert "Invalid key" in error["errorDetails"]


def test_initialize_survives_store_failure(
    test_client, purchase_payload, firestore_client
):
    firestore_client.fail("payments", "write")

    response = initialize(test_client, purchase_payload)

    assert response.status_code == 200
    assert response.json()["data"]["authorization_url"]


# ==================== SAVE ====================


def test_save_parses_price_label(test_client, purchase_payload, firestore_client):
    purchase_payload.update(
        documentId="1",
        documentTitle="Offer To Purchase - Residential Property",
        documentPrice="R 450",
        paymentReference="AKA_LAW_1_SAVED0",
        authorizationUrl="https://checkout.paystack.com/saved0",
        accessCode="saved0",
    )

    response = test_client.post("/payment/save", json=purchase_payload)

    assert response.status_code == 200
    body = response.json()
    assert body["status"] is True
    assert body["message"] == "Payment data saved successfully"
    assert body["data"]["paymentReference"] == "AKA_LAW_1_SAVED0"
    assert body["data"]["firestoreId"] in firestore_client.data["payments"]

    stored = firestore_client.data["payments"][body["data"]["firestoreId"]]
    assert stored["documentPrice"] == 450
    assert stored["amount"] == 45000
    assert stored["documentCategory"] == "property"


def test_save_requires_reference(test_client, purchase_payload):
    response = test_client.post("/payment/save", json=purchase_payload)

    assert response.status_code == 400
    assert response.json() == {"status": False, "message": "Missing required fields"}


def test_save_rejects_malformed_email(test_client, purchase_payload, firestore_client):
    purchase_payload.update(customerEmail="not-an-email", paymentReference="AKA_LAW_1_SAVED0")

    response = test_client.post("/payment/save", json=purchase_payload)

    assert response.status_code == 400
    assert response.json() == {"status": False, "message": "Invalid email format"}
    assert firestore_client.documents("payments") == []


def test_save_rejects_price_below_catalog(test_client, purchase_payload, firestore_client):
    purchase_payload.update(documentPrice=1, paymentReference="AKA_LAW_1_SAVED0")

    response = test_client.post("/payment/save", json=purchase_payload)

    assert response.status_code == 400
    assert response.json() == {
        "status": False,
        "message": "Document price does not match the catalog",
    }
    assert firestore_client.documents("payments") == []


def test_save_store_failure(test_client, purchase_payload, firestore_client):
    firestore_client.fail("payments", "write")
    purchase_payload["paymentReference"] = "AKA_LAW_1_SAVED0"

    response = test_client.post("/payment/save", json=purchase_payload)

    assert response.status_code == 500
    assert response.json() == {"status": False, "message": "Failed to save payment data"}


# ==================== VERIFY ====================


def test_verify_success_updates_record_customer_and_sends_emails(
    test_client, purchase_payload, firestore_client, email_session
):
    reference = initialize(test_client, purchase_payload).json()["data"]["reference"]

    response = test_client.get("/payment/verify", params={"reference": reference})

    assert response.status_code == 200
    body = response.json()
    assert body["data"]["status"] == "success"
    assert body["data"]["reference"] == reference
    assert body["data"]["fees"] == 1625

    (stored,) = firestore_client.documents("payments")
    assert stored["paymentStatus"] == "success"
    assert stored["paidAt"] is not None
    assert stored["gatewayResponse"] == "Successful"
    assert stored["paystackData"]["channel"] == "card"
    assert stored["paystackCustomer"]["customerCode"] == "CUS_xnxdt6s1zg1f4nx"

    (customer,) = firestore_client.documents("customers")
    assert customer["totalPurchases"] == 1
    assert customer["totalSpent"] == 550
    assert customer["purchasedDocuments"] == ["2"]

    assert len(email_session.calls) == 2
    customer_email = next(c for c in email_session.calls if c["json"]["to"] == ["a@b.com"])
    assert f"{BASE_URL}/download/{reference}" in customer_email["json"]["html"]


def test_verify_twice_counts_purchase_once(test_client, purchase_payload, firestore_client):
    reference = initialize(test_client, purchase_payload).json()["data"]["reference"]

    test_client.get("/payment/verify", params={"reference": reference})
    test_client.get("/payment/verify", params={"reference": reference})

    (customer,) = firestore_client.documents("customers")
    assert customer["totalPurchases"] == 1


def test_verify_failed_payment_sends_no_email(
    test_client, purchase_payload, paystack, firestore_client, email_session
):
    paystack.verification_status = "failed"
    reference = initialize(test_client, purchase_payload).json()["data"]["reference"]

    response = test_client.get("/payment/verify", params={"reference": reference})

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "failed"
    assert firestore_client.documents("payments")[0]["paymentStatus"] == "failed"
    assert firestore_client.documents("customers") == []
    assert email_session.calls == []


def test_verify_sends_no_email_when_record_update_fails(
    test_client, purchase_payload, firestore_client, email_session
):
    reference = initialize(test_client, purchase_payload).json()["data"]["reference"]
    firestore_client.fail("payments", "write")

    response = test_client.get("/payment/verify", params={"reference": reference})

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "success"
    assert firestore_client.documents("payments")[0]["paymentStatus"] == "pending"
    assert firestore_client.documents("customers") == []
    assert email_session.calls == []
    (error,) = firestore_client.documents("payment_errors")
    assert error["errorType"] == "database"


def test_paystack_calls_run_off_the_event_loop_thread(workflow, paystack):
    request = InitializePaymentRequest(
        documentId="2",
        documentTitle="Last Will & Testament",
        documentPrice=550,
        customerName="A",
        customerEmail="a@b.com",
    )

    async def purchase():
        response = await workflow.initialize(request, ClientInfo())
        await workflow.verify(response.data.reference)

    asyncio.run(purchase())

    assert len(paystack.thread_ids) == 2
    assert threading.get_ident() not in paystack.thread_ids


def test_verify_requires_reference(test_client):
    response = test_client.get("/payment/verify")

    assert response.status_code == 400
    assert response.json() == {"status": False, "message": "Payment reference is required"}


def test_verify_gateway_failure(test_client, paystack, firestore_client):
    paystack.fail_verify = True

    response = test_client.get("/payment/verify", params={"reference": "AKA_LAW_1_AAAAAA"})

    assert response.status_code == 500
    assert response.json() == {"status": False, "message": "Failed to verify payment"}
    (error,) = firestore_client.documents("payment_errors")
    assert error["errorType"] == "verification"
    assert error["paymentReference"] == "AKA_LAW_1_AAAAAA"


def test_verify_without_local_record_still_returns_payload(
    test_client, firestore_client, email_session
):
    response = test_client.get("/payment/verify", params={"reference": "AKA_LAW_1_UNSEEN"})

    assert response.status_code == 200
    assert response.json()["data"]["reference"] == "AKA_LAW_1_UNSEEN"
    assert email_session.calls == []
    assert firestore_client.documents("payment_errors")[0]["errorType"] == "database"


def test_verify_survives_email_failure(
    test_client, purchase_payload, firestore_client, email_session
):
    email_session.failing_recipients.update({"a@b.com", "websales@akalaw.co.za"})
    reference = initialize(test_client, purchase_payload).json()["data"]["reference"]

    response = test_client.get("/payment/verify", params={"reference": reference})

    assert response.status_code == 200
    assert firestore_client.documents("payments")[0]["paymentStatus"] == "success"


# ==================== REFERENCES ====================


def test_colliding_references_resolve_to_first_record(
    paystack, record_store, email_service, documents_dir, purchase_payload, firestore_client
):
    from fastapi.testclient import TestClient

    workflow = PaymentWorkflow(
        paystack=paystack,
        record_store=record_store,
        email_service=email_service,
        base_url=BASE_URL,
        documents_dir=str(documents_dir),
        reference_factory=lambda: "AKA_LAW_1_SAME00",
    )
    app.dependency_overrides[get_payment_workflow] = lambda: workflow
    try:
        with TestClient(app) as client:
            client.post("/payment/initialize", json=purchase_payload)
            client.post(
                "/payment/initialize", json={**purchase_payload, "customerName": "B"}
            )
            client.get("/payment/verify", params={"reference": "AKA_LAW_1_SAME00"})
    finally:
        app.dependency_overrides.clear()

    first, second = firestore_client.documents("payments")
    assert first["customerName"] == "A"
    assert first["paymentStatus"] == "success"
    assert second["paymentStatus"] == "pending"


def test_sanitize_filename():
    assert sanitize_filename("Last Will & Testament") == "Last_Will_Testament.zip"
    assert (
        sanitize_filename("Offer To Purchase - Residential Property")
        == "Offer_To_Purchase_Residential_Property.zip"
    )
