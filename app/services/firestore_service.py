"""
Firestore Service Layer

Thin async wrapper over the Firebase Admin Firestore client. Documents go in as
camelCase dicts (``FirestoreBaseModel.to_firestore()``) and come back as the model
registered for their collection in ``app.models.COLLECTION_MODELS``.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Type, TypeVar, Union

import firebase_admin
from firebase_admin import firestore
from google.cloud.firestore import Client, DocumentReference, Increment, Query

from app.models import COLLECTION_MODELS
from app.models.shared import FirestoreBaseModel

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

T = TypeVar("T", bound=FirestoreBaseModel)

# (field, operator, value), e.g. ("paymentReference", "==", "AKA_LAW_...")
Filter = Tuple[str, str, Any]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class FirestoreService:
    """Collection-level reads and writes against one Firestore database."""

    def __init__(
        self, database_name: str = "(default)", client: Optional[Client] = None
    ):
        self.database_name = database_name
        self._client = client

    @property
    def client(self) -> Client:
        if self._client is None:
            try:
                app = firebase_admin.get_app()
            except ValueError:
                app = firebase_admin.initialize_app()
            self._client = firestore.client(app, database=self.database_name)
            logger.info(f"Connected to Firestore database {self.database_name}")
        return self._client

    def get_collection_ref(self, collection_name: str):
        return self.client.collection(collection_name)

    def get_document_ref(
        self, collection_name: str, document_id: str
    ) -> DocumentReference:
        return self.get_collection_ref(collection_name).document(document_id)

    def _to_model(
        self,
        collection_name: str,
        document_id: str,
        data: Dict[str, Any],
        model_class: Optional[Type[T]],
    ) -> Union[T, Dict[str, Any]]:
        data["id"] = document_id
        model_class = model_class or COLLECTION_MODELS.get(collection_name)
        return model_class.model_validate(data) if model_class else data

    async def create_document(
        self,
        collection_name: str,
        document_data: Dict[str, Any],
        document_id: Optional[str] = None,
    ) -> str:
        """
        Write a new document, stamping ``createdAt``/``updatedAt`` unless provided.

        Returns:
            The document ID (a UUID when none is given)
        """
        document_id = document_id or str(uuid.uuid4())
        now = utc_now()
        document_data.setdefault("createdAt", now)
        document_data.setdefault("updatedAt", now)

        try:
            self.get_document_ref(collection_name, document_id).set(document_data)
        except Exception as e:
            logger.error(f"Failed to create document in {collection_name}: {str(e)}")
            raise

        logger.info(f"Created document {document_id} in {collection_name}")
        return document_id

    async def update_document(
        self, collection_name: str, document_id: str, update_data: Dict[str, Any]
    ) -> bool:
        """
        Apply a partial update and refresh ``updatedAt``.

        Dotted keys (``"paystackData.channel"``) set nested fields without replacing
        the enclosing map.
        """
        update_data["updatedAt"] = utc_now()

        try:
            self.get_document_ref(collection_name, document_id).update(update_data)
        except Exception as e:
            logger.error(
                f"Failed to update document {document_id} in {collection_name}: {str(e)}"
            )
            raise

        logger.info(f"Updated document {document_id} in {collection_name}")
        return True

    async def increment_document(
        self,
        collection_name: str,
        document_id: str,
        increments: Dict[str, Union[int, float]],
        update_data: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """Atomically add to numeric fields, setting ``update_data`` in the same write."""
        data = dict(update_data or {})
        data.update({field: Increment(amount) for field, amount in increments.items()})
        return await self.update_document(collection_name, document_id, data)

    async def query_collection(
        self,
        collection_name: str,
        filters: Optional[List[Filter]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        model_class: Optional[Type[T]] = None,
    ) -> List[T]:
        """
        Query a collection.

        Results keep Firestore's order; without ``order_by`` that is document order,
        so ``limit=1`` returns the first stored match.
        """
        query = self.get_collection_ref(collection_name)
        for field, operator, value in filters or []:
            query = query.where(field, operator, value)
        if order_by:
            query = query.order_by(
                order_by, direction=Query.DESCENDING if descending else Query.ASCENDING
            )
        if offset:
            query = query.offset(offset)
        if limit:
            query = query.limit(limit)

        try:
            return [
                self._to_model(collection_name, doc.id, doc.to_dict(), model_class)
                for doc in query.stream()
            ]
        except Exception as e:
            logger.error(f"Failed to query collection {collection_name}: {str(e)}")
            raise


_firestore_service: Optional[FirestoreService] = None


def get_firestore_service(database_name: str = "(default)") -> FirestoreService:
    """Process-wide FirestoreService for the configured database."""
    global _firestore_service
    if _firestore_service is None:
        _firestore_service = FirestoreService(database_name)
    return _firestore_service
