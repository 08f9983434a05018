"""Service layer for generic collection operations."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from flask import current_app

from ricgcw.constants import FIELD_CREATED_AT
from ricgcw.errors import NotFoundError, ValidationError
from ricgcw.utils import utcnow_iso

if TYPE_CHECKING:
    from flask import Request
    from google.cloud.firestore_v1.client import Client

    from .models import Record


class CollectionService:
    """CRUD operations over the Firestore collection of one record type.

    Subclasses hook into ``create``, ``update`` and ``delete`` for collections
    with extra rules (member name uniqueness, resource files).
    """

    def __init__(self, record_type: type[Record]) -> None:
        """Bind the service to a record type."""
        self.record_type = record_type

    @property
    def collection(self) -> str:
        """Name of the Firestore collection."""
        return self.record_type.collection

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.collection}>"

    def payload_from_request(self, request: Request) -> Any:
        """Extract the create payload from the incoming request."""
        return self.json_body(request)

    @staticmethod
    def json_body(request: Request) -> Any:
        """Return the decoded JSON body, rejecting bodies that are not JSON."""
        data = request.get_json(silent=True)
        if data is None:
            raise ValidationError("Request body must be a JSON object.")
        return data

    def list_all(self, db: Client) -> list[dict[str, Any]]:
        """Return every document in the collection, each with its id."""
        return [
            {"id": doc.id, **(doc.to_dict() or {})}
            for doc in db.collection(self.collection).stream()
        ]

    def prepare(self, data: Any) -> dict[str, Any]:
        """Validate a create payload and stamp its creation time."""
        record = self.record_type.validate(data)
        if not record.get(FIELD_CREATED_AT):
            record[FIELD_CREATED_AT] = utcnow_iso()
        return record

    def create(self, db: Client, data: Any) -> dict[str, Any]:
        """Insert a new document and return it with its store-assigned id."""
        record = self.prepare(data)
        doc_ref = db.collection(self.collection).document()
        doc_ref.set(record)
        current_app.logger.info(f"POST /{self.collection} - Created ID: {doc_ref.id}")
        return {"id": doc_ref.id, **record}

    def get(self, db: Client, doc_id: str) -> Optional[dict[str, Any]]:
        """Return a document's data, or None if it does not exist."""
        snapshot = db.collection(self.collection).document(doc_id).get()
        if not snapshot.exists:
            return None
        return snapshot.to_dict() or {}

    def update(self, db: Client, doc_id: str, data: Any) -> dict[str, Any]:
        """Merge the supplied fields into an existing document.

        Raises:
            NotFoundError: If no document has this id; nothing is written.
        """
        changes = self.record_type.validate(data, partial=True)
        if self.get(db, doc_id) is None:
            raise NotFoundError(
                f"No {self.record_type.label} with id '{doc_id}' in {self.collection}."
            )
        self._merge(db, doc_id, changes)
        return {"id": doc_id, **changes}

    def _merge(self, db: Client, doc_id: str, changes: dict[str, Any]) -> None:
        db.collection(self.collection).document(doc_id).set(changes, merge=True)
        current_app.logger.info(f"PUT /{self.collection}/{doc_id} - Updated")

    def delete(self, db: Client, doc_id: str) -> None:
        """Delete a document; deleting a missing id is not an error."""
        db.collection(self.collection).document(doc_id).delete()
        current_app.logger.info(f"DELETE /{self.collection}/{doc_id} - Deleted")
