"""Core module for the ricgcw application."""

from .types import FirestoreDocument, LoginResponse

__all__ = ["FirestoreDocument", "LoginResponse"]
