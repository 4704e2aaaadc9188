import asyncio

from app.server.dependencies import get_admin_api_key
from app.server.main import app
from tests.fakes import ADMIN_KEY, make_payment, success_update

HEADERS = {"X-Admin-Key": ADMIN_KEY}


def seed(record_store, *references):
    async def create():
        for reference in references:
            await record_store.create_payment_record(make_payment(reference))

    asyncio.run(create())


def test_statistics(test_client, record_store):
    seed(record_store, "AKA_LAW_1_AAAAAA", "AKA_LAW_2_BBBBBB")
    asyncio.run(record_store.update_payment_record("AKA_LAW_1_AAAAAA", success_update()))

    response = test_client.get("/admin/payments/statistics", headers=HEADERS)

    assert response.status_code == 200
    assert response.json() == {
        "status": True,
        "data": {
            "total_payments": 2,
            "successful_payments": 1,
            "total_revenue": 550,
            "average_order_value": 550,
        },
    }


def test_statistics_rejects_out_of_range_days(test_client):
    response = test_client.get(
        "/admin/payments/statistics", params={"days": 0}, headers=HEADERS
    )

    assert response.status_code == 400


def test_customer_payments(test_client, record_store):
    seed(record_store, "AKA_LAW_1_AAAAAA")

    response = test_client.get("/admin/customers/a@b.com/payments", headers=HEADERS)

    assert response.status_code == 200
    (payment,) = response.json()["data"]
    assert payment["paymentReference"] == "AKA_LAW_1_AAAAAA"
    assert payment["paymentStatus"] == "pending"


def test_customer_without_payments(test_client):
    response = test_client.get("/admin/customers/c@d.com/payments", headers=HEADERS)

    assert response.status_code == 200
    assert response.json() == {"status": True, "data": []}


def test_wrong_or_missing_key_is_rejected(test_client, firestore_client):
    assert test_client.get("/admin/payments/statistics").status_code == 401
    response = test_client.get(
        "/admin/payments/statistics", headers={"X-Admin-Key": "wrong"}
    )
    assert response.status_code == 401
    assert "payments" not in firestore_client.data


def test_unconfigured_admin_key_disables_routes(test_client):
    app.dependency_overrides[get_admin_api_key] = lambda: ""

    response = test_client.get("/admin/payments/statistics", headers=HEADERS)

    assert response.status_code == 503
