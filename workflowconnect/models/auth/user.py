# Enable postponed annotations to avoid runtime import issues and allow future-style typing
from __future__ import annotations

import time
from typing import Optional

from sqlalchemy.orm import Mapped

from ...extensions import db


# User accounts persisted in the database
class User(db.Model):
    # Surrogate primary key integer id
    id: Mapped[int] = db.Column(db.Integer, primary_key=True)
    # Display name of the user
    name: Mapped[str] = db.Column(db.String(255), nullable=False)
    # Email address; unique to prevent duplicates
    email: Mapped[Optional[str]] = db.Column(db.String(255), unique=True)
    # Profile picture URL
    photo_url: Mapped[Optional[str]] = db.Column(db.String(1024))
    # Marketplace role: client | freelancer
    role: Mapped[str] = db.Column(db.String(32), default="client")
    # Presence flag; written only by the presence broadcaster
    is_online: Mapped[bool] = db.Column(db.Boolean, default=False, nullable=False)
    # Epoch seconds of the last presence transition
    last_seen: Mapped[Optional[int]] = db.Column(db.Integer, nullable=True)
    # Epoch seconds when the account was created
    created_at: Mapped[int] = db.Column(db.Integer, default=lambda: int(time.time()))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "photoURL": self.photo_url,
            "role": self.role,
            "isOnline": bool(self.is_online),
            "lastSeen": self.last_seen,
        }


__all__ = ["User"]
