"""Database models for Mapty."""
from mapty.models.stored_blob import StoredBlob

__all__ = ["StoredBlob"]
