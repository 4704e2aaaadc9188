import logging
from traceback import format_exc
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse, JSONResponse

from app.models.checkout import ClientInfo
from app.server.dependencies import get_client_info, get_payment_workflow
from app.services.exceptions import AkaLawError, DocumentNotReadyError
from app.services.payments.workflow import PaymentWorkflow

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create a router for document downloads
download_router = APIRouter()

NO_CACHE_HEADERS = {
    "Cache-Control": "private, no-cache, no-store, must-revalidate",
    "Expires": "0",
    "Pragma": "no-cache",
}


@download_router.get("/{reference}")
async def download_document(
    reference: str,
    workflow: Annotated[PaymentWorkflow, Depends(get_payment_workflow)],
    client_info: Annotated[ClientInfo, Depends(get_client_info)],
):
    """Stream the purchased document archive for a successful payment."""
    try:
        ticket = await workflow.prepare_download(reference)
    except DocumentNotReadyError as e:
        return JSONResponse(
            status_code=e.status_code,
            content={
                "error": e.message,
                "reference": e.reference,
                "documentTitle": e.document_title,
            },
        )
    except AkaLawError as e:
        return JSONResponse(status_code=e.status_code, content={"error": e.message})
    except Exception as e:
        logger.error(f"Download error: {str(e)}\n{format_exc()}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    try:
        await workflow.record_download(ticket, client_info)
    except Exception as e:
        logger.warning(f"Failed to record download (non-blocking): {str(e)}")

    return FileResponse(
        ticket.file_path,
        media_type="application/zip",
        headers={
            "Content-Disposition": f'attachment; filename="{ticket.filename}"',
            **NO_CACHE_HEADERS,
        },
    )
