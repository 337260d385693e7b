"""StoredBlob model backing the key/value durable storage."""
from datetime import datetime

from sqlalchemy import Column, DateTime, String, Text

from mapty.database import Base


class StoredBlob(Base):
    """
    A single serialized value stored under a well-known key.

    The workout list lives here as one JSON document under the "workouts" key.
    """
    __tablename__ = "stored_blobs"

    key = Column(String, primary_key=True, index=True)
    value = Column(Text, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<StoredBlob(key='{self.key}', size={len(self.value or '')})>"
