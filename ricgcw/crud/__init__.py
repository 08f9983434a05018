"""Generic CRUD blueprints over Firestore collections."""

from .routes import create_collection_blueprint
from .services import CollectionService

__all__ = ["CollectionService", "create_collection_blueprint"]
