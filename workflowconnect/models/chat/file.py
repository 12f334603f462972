# Enable postponed annotations to avoid runtime import issues and allow future-style typing
from __future__ import annotations

import time

from sqlalchemy.orm import Mapped, deferred

from ...extensions import db


# Binary attachment stored alongside chat data
class File(db.Model):
    # Surrogate primary key id
    id: Mapped[int] = db.Column(db.Integer, primary_key=True)
    # Original client-side name
    filename: Mapped[str] = db.Column(db.String(512), nullable=False)
    # MIME type reported by the uploader
    content_type: Mapped[str] = db.Column(
        db.String(255), nullable=False, default="application/octet-stream"
    )
    # Size in bytes as decoded on the server
    size: Mapped[int] = db.Column(db.Integer, nullable=False, default=0)
    # Raw bytes; deferred so message listings never load them
    data: Mapped[bytes] = deferred(db.Column(db.LargeBinary, nullable=False))
    # Uploading user; the only user allowed to delete the file
    uploaded_by_id: Mapped[int] = db.Column(
        db.Integer, db.ForeignKey("user.id"), nullable=False, index=True
    )
    created_at: Mapped[int] = db.Column(db.Integer, default=lambda: int(time.time()))

    def to_meta(self) -> dict:
        return {
            "id": self.id,
            "filename": self.filename,
            "contentType": self.content_type,
            "size": self.size,
        }


__all__ = ["File"]
