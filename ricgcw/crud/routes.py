from __future__ import annotations

from typing import TYPE_CHECKING, Any

from firebase_admin import firestore
from flask import Blueprint, current_app, jsonify, request

from ricgcw.errors import AppError

if TYPE_CHECKING:
    from .services import CollectionService


def store_error(message: str, error: Exception) -> Any:
    """Log a failed store operation and answer it with a 500."""
    current_app.logger.error(f"{message}: {error}")
    return jsonify({"error": str(error)}), 500


def create_collection_blueprint(service: CollectionService) -> Blueprint:
    """Build the list/create/update/delete routes for one collection.

    The routes are mounted under ``/<collection>``; the service decides how
    payloads are read, validated and written.
    """
    collection = service.collection
    bp = Blueprint(
        f"{collection.replace('-', '_')}_collection",
        __name__,
        url_prefix=f"/{collection}",
    )

    @bp.route("", methods=["GET"])
    @bp.route("/", methods=["GET"])
    def list_documents() -> Any:
        """Return every document in the collection."""
        try:
            items = service.list_all(firestore.client())
        except Exception as e:
            return store_error(f"Failed to fetch {collection}", e)
        current_app.logger.info(f"GET /{collection} - Sent {len(items)} records")
        return jsonify(items), 200

    @bp.route("", methods=["POST"])
    @bp.route("/", methods=["POST"])
    def create_document() -> Any:
        """Create a document from the request body."""
        try:
            payload = service.payload_from_request(request)
            item = service.create(firestore.client(), payload)
        except AppError:
            raise
        except Exception as e:
            return store_error(f"Failed to create item in {collection}", e)
        return jsonify(item), 201

    @bp.route("/<doc_id>", methods=["PUT"])
    def update_document(doc_id: str) -> Any:
        """Merge the request body into an existing document."""
        try:
            payload = service.json_body(request)
            item = service.update(firestore.client(), doc_id, payload)
        except AppError:
            raise
        except Exception as e:
            return store_error(f"Failed to update item {doc_id} in {collection}", e)
        return jsonify(item), 200

    @bp.route("/<doc_id>", methods=["DELETE"])
    def delete_document(doc_id: str) -> Any:
        """Delete a document."""
        try:
            service.delete(firestore.client(), doc_id)
        except AppError:
            raise
        except Exception as e:
            return store_error(f"Failed to delete item {doc_id} in {collection}", e)
        return "", 204

    return bp
