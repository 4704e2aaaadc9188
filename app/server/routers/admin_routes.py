import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.server.dependencies import get_record_store, verify_admin_key
from app.services.payments.record_store import PaymentRecordStore

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create admin router; every route requires the admin key
admin_router = APIRouter(dependencies=[Depends(verify_admin_key)])


@admin_router.get("/payments/statistics")
async def get_payment_statistics(
    record_store: Annotated[PaymentRecordStore, Depends(get_record_store)],
    days: Annotated[int, Query(ge=1, le=365)] = 30,
):
    """Payment totals and revenue for the last ``days`` days."""
    stats = await record_store.get_payment_statistics(days=days)
    logger.info(f"Payment statistics requested for the last {days} days")
    return {"status": True, "data": stats.model_dump()}


@admin_router.get("/customers/{customer_email}/payments")
async def get_customer_payments(
    customer_email: str,
    record_store: Annotated[PaymentRecordStore, Depends(get_record_store)],
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
):
    """A customer's payment history, newest first."""
    payments = await record_store.get_customer_payments(customer_email, limit=limit)
    return {
        "status": True,
        "data": [payment.model_dump(mode="json", by_alias=True) for payment in payments],
    }
