"""Service layer for uploaded teaching resources."""

from __future__ import annotations

import os
import tempfile
import uuid
from typing import TYPE_CHECKING, Any

from firebase_admin import storage
from flask import current_app
from werkzeug.utils import secure_filename

from ricgcw.constants import RESOURCE_UPLOAD_PREFIX
from ricgcw.crud.models import Resource
from ricgcw.crud.services import CollectionService
from ricgcw.errors import ValidationError

if TYPE_CHECKING:
    from flask import Request
    from google.cloud.firestore_v1.client import Client
    from werkzeug.datastructures import FileStorage


def infer_resource_type(file_storage: FileStorage) -> str:
    """Audio uploads are 'audio'; anything else is treated as a document."""
    mimetype = file_storage.mimetype or ""
    return "audio" if mimetype.startswith("audio/") else "pdf"


def upload_resource_file(file_storage: FileStorage) -> dict[str, Any]:
    """Upload a file to Firebase Storage and describe where it went."""
    filename = secure_filename(file_storage.filename or "resource")
    storage_path = f"{RESOURCE_UPLOAD_PREFIX}/{uuid.uuid4().hex}/{filename}"
    bucket = storage.bucket()
    blob = bucket.blob(storage_path)

    with tempfile.NamedTemporaryFile(suffix=os.path.splitext(filename)[1]) as temp_file:
        file_storage.save(temp_file.name)
        size = os.path.getsize(temp_file.name)
        blob.upload_from_filename(temp_file.name, content_type=file_storage.mimetype)

    blob.make_public()
    return {
        "url": blob.public_url,
        "storagePath": storage_path,
        "fileName": filename,
        "size": size,
    }


def delete_resource_file(storage_path: str) -> None:
    """Remove an uploaded file from Firebase Storage."""
    storage.bucket().blob(storage_path).delete()


class ResourceService(CollectionService):
    """Resources accept either JSON links or multipart file uploads."""

    def __init__(self) -> None:
        """Bind the service to the resource record type."""
        super().__init__(Resource)

    def payload_from_request(self, request: Request) -> Any:
        """Read a JSON body, or upload the file of a multipart form."""
        file_storage = request.files.get("file")
        if file_storage is None:
            return self.json_body(request)

        title = (request.form.get("title") or "").strip()
        if not title:
            raise ValidationError("Field 'title' is required.")
        resource_type = request.form.get("type") or infer_resource_type(file_storage)
        # Validate before uploading so rejected forms leave no orphan files.
        payload = Resource.validate({"title": title, "type": resource_type})
        payload.update(upload_resource_file(file_storage))
        current_app.logger.info(f"Uploaded resource file to {payload['storagePath']}")
        return payload

    def delete(self, db: Client, doc_id: str) -> None:
        """Delete a resource and its stored file, if it has one."""
        current = self.get(db, doc_id)
        super().delete(db, doc_id)
        storage_path = (current or {}).get("storagePath")
        if not storage_path:
            return
        try:
            delete_resource_file(storage_path)
        except Exception as e:
            current_app.logger.warning(
                f"Could not remove stored file {storage_path} for resource {doc_id}: {e}"
            )
