import logging
from traceback import format_exc
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.models.checkout import (
    ClientInfo,
    InitializePaymentRequest,
    SavePaymentRequest,
)
from app.models.documents import DocumentCatalogEntry, list_catalog
from app.server.dependencies import get_client_info, get_payment_workflow
from app.services.exceptions import AkaLawError, GatewayError, StoreError
from app.services.payments.workflow import PaymentWorkflow

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create payment router
payment_router = APIRouter()


class DocumentsResponse(BaseModel):
    data: List[DocumentCatalogEntry]


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"status": False, "message": message}
    )


@payment_router.get("/documents", response_model=DocumentsResponse)
async def get_documents() -> DocumentsResponse:
    """List the purchasable document templates."""
    return DocumentsResponse(data=list_catalog())


@payment_router.post("/initialize")
async def initialize_payment(
    request: InitializePaymentRequest,
    workflow: Annotated[PaymentWorkflow, Depends(get_payment_workflow)],
    client_info: Annotated[ClientInfo, Depends(get_client_info)],
):
    """Initialize a Paystack transaction and return the authorization URL."""
    try:
        response = await workflow.initialize(request, client_info)
        return response.model_dump(mode="json")

    except GatewayError as e:
        logger.error(
            f"Payment initialization failed: {e.message} "
            f"(upstream {e.upstream_status}: {e.upstream_body})"
        )
        return error_response(500, "Failed to initialize payment")
    except AkaLawError as e:
        return error_response(e.status_code, e.message)
    except Exception as e:
        logger.error(f"Payment initialization error: {str(e)}\n{format_exc()}")
        return error_response(500, "Failed to initialize payment")


@payment_router.post("/save")
async def save_payment(
    request: SavePaymentRequest,
    workflow: Annotated[PaymentWorkflow, Depends(get_payment_workflow)],
    client_info: Annotated[ClientInfo, Depends(get_client_info)],
):
    """Save the pending payment record."""
    try:
        result = await workflow.save(request, client_info)
        return {
            "status": True,
            "message": "Payment data saved successfully",
            "data": result.model_dump(by_alias=True),
        }

    except StoreError as e:
        logger.error(f"Error saving payment data: {e.message}")
        return error_response(500, "Failed to save payment data")
    except AkaLawError as e:
        return error_response(e.status_code, e.message)
    except Exception as e:
        logger.error(f"Error saving payment data: {str(e)}\n{format_exc()}")
        return error_response(500, "Failed to save payment data")


@payment_router.get("/verify")
async def verify_payment(
    workflow: Annotated[PaymentWorkflow, Depends(get_payment_workflow)],
    reference: Optional[str] = None,
):
    """Verify a transaction; the Paystack verification payload is passed through."""
    try:
        outcome = await workflow.verify(reference)
        return outcome.verification.to_payload()

    except GatewayError as e:
        logger.error(
            f"Payment verification failed: {e.message} "
            f"(upstream {e.upstream_status}: {e.upstream_body})"
        )
        return error_response(500, "Failed to verify payment")
    except AkaLawError as e:
        return error_response(e.status_code, e.message)
    except Exception as e:
        logger.error(f"Payment verification error: {str(e)}\n{format_exc()}")
        return error_response(500, "Failed to verify payment")
