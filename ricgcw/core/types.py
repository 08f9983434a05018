"""Core data types for the ricgcw application."""

from typing import Any, TypedDict


class _FirestoreDocumentBase(TypedDict):
    id: str


class FirestoreDocument(_FirestoreDocumentBase, total=False):
    """Generic Firestore document as returned over the API."""

    createdAt: Any
    branch: str


class LoginResponse(TypedDict):
    """Body of a successful login."""

    isAuthenticated: bool
    role: str
    branch: str
    email: str
