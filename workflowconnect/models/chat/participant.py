# Enable postponed annotations to avoid runtime import issues and allow future-style typing
from __future__ import annotations

import time
from typing import TYPE_CHECKING

from sqlalchemy.orm import Mapped

from ...extensions import db

if TYPE_CHECKING:
    from ...models.auth.user import User


# Association between a user and a chat
class ChatParticipant(db.Model):
    # Surrogate primary key id
    id: Mapped[int] = db.Column(db.Integer, primary_key=True)
    # Parent chat id; indexed for fast membership queries
    chat_id: Mapped[int] = db.Column(
        db.Integer, db.ForeignKey("chat.id"), nullable=False, index=True
    )
    # Member user id; indexed for "my chats" lookups
    user_id: Mapped[int] = db.Column(
        db.Integer, db.ForeignKey("user.id"), nullable=False, index=True
    )
    # Timestamp of when user joined the chat
    joined_at: Mapped[int] = db.Column(db.Integer, default=lambda: int(time.time()))

    # Relationship back to the user entity for convenient access
    user: Mapped["User"] = db.relationship("User")

    # Ensure a user can have at most one membership per chat
    __table_args__ = (
        db.UniqueConstraint("chat_id", "user_id", name="uq_chat_participant_chat_user"),
    )


__all__ = ["ChatParticipant"]
