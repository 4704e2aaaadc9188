"""
Document Catalog

The legal document templates sold on the site. This table is the single source for
titles, prices, categories and the pre-built archive served on download.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from app.models.shared import DocumentCategory

# Format stored on payment records
DOCUMENT_FORMAT = "PDF & Word"


class DocumentCatalogEntry(BaseModel):
    """A purchasable document template."""

    id: str = Field(..., description="Catalog document ID")
    title: str = Field(..., description="Document title")
    price: int = Field(..., gt=0, description="Price in Rand")
    category: DocumentCategory = Field(..., description="Document category")
    format: str = Field("ZIP (PDF & Word)", description="Display format label")
    archive: str = Field(..., description="ZIP file name under the documents dir")

DOCUMENT_CATALOG: Dict[str, DocumentCatalogEntry] = {
    entry.id: entry
    for entry in [
        DocumentCatalogEntry(
            id="1",
            title="Offer To Purchase - Residential Property",
            price=450,
            category=DocumentCategory.PROPERTY,
            archive="offer-to-purchase-residential.zip",
        ),
        DocumentCatalogEntry(
            id="2",
            title="Last Will & Testament",
            price=550,
            category=DocumentCategory.ESTATE,
            archive="last-will-testament.zip",
        ),
        DocumentCatalogEntry(
            id="3",
            title="Living Will",
            price=550,
            category=DocumentCategory.ESTATE,
            archive="living-will.zip",
        ),
    ]
}


def get_catalog_entry(document_id: str) -> Optional[DocumentCatalogEntry]:
    return DOCUMENT_CATALOG.get(str(document_id))


def list_catalog() -> List[DocumentCatalogEntry]:
    return list(DOCUMENT_CATALOG.values())
