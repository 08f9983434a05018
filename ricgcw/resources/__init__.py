"""Uploaded teaching resources (sermon notes, audio)."""

from .services import ResourceService

__all__ = ["ResourceService"]
