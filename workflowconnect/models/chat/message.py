# Enable postponed annotations to avoid runtime import issues and allow future-style typing
from __future__ import annotations

from typing import Optional, TYPE_CHECKING

from sqlalchemy.orm import Mapped

from ...extensions import db
from ...lib.utils import now_ms

if TYPE_CHECKING:
    from ...models.auth.user import User
    from .chat import Chat
    from .file import File

# Text shown in place of a soft-deleted message
DELETED_PLACEHOLDER = "[Message deleted]"


class Message(db.Model):
    """A single chat message, optionally carrying a file attachment."""

    # Surrogate primary key id
    id: Mapped[int] = db.Column(db.Integer, primary_key=True)
    # Owning chat id
    chat_id: Mapped[int] = db.Column(
        db.Integer, db.ForeignKey("chat.id"), nullable=False, index=True
    )
    # Sender user id
    sender_id: Mapped[int] = db.Column(
        db.Integer, db.ForeignKey("user.id"), nullable=False, index=True
    )
    # Message text content
    text: Mapped[str] = db.Column(db.Text, nullable=False, default="")
    # Attached blob, if any
    file_id: Mapped[Optional[int]] = db.Column(
        db.Integer, db.ForeignKey("file.id"), nullable=True, index=True
    )
    # Set once any participant other than the sender has fetched the history
    read: Mapped[bool] = db.Column(db.Boolean, default=False, nullable=False)
    edited: Mapped[bool] = db.Column(db.Boolean, default=False, nullable=False)
    # Soft delete flag; deleted rows stay in history with placeholder text
    deleted: Mapped[bool] = db.Column(db.Boolean, default=False, nullable=False)
    # Epoch milliseconds; creation time defines history order
    created_at: Mapped[int] = db.Column(db.BigInteger, default=now_ms, index=True)
    updated_at: Mapped[int] = db.Column(db.BigInteger, default=now_ms)

    chat: Mapped["Chat"] = db.relationship("Chat", back_populates="messages")
    sender: Mapped["User"] = db.relationship("User")
    file: Mapped[Optional["File"]] = db.relationship("File", uselist=False)

    @staticmethod
    def history(chat_id: int) -> list["Message"]:
        return (
            db.session.query(Message)
            .filter_by(chat_id=chat_id)
            .order_by(Message.created_at.asc(), Message.id.asc())
            .all()
        )

    @staticmethod
    def mark_read(chat_id: int, reader_id: int) -> int:
        """Flag every unread message from other senders as read; returns the row count."""
        return (
            db.session.query(Message)
            .filter(
                Message.chat_id == chat_id,
                Message.sender_id != reader_id,
                Message.read.is_(False),
            )
            .update({Message.read: True}, synchronize_session=False)
        )

    def to_dict(self) -> dict:
        sender = self.sender
        return {
            "id": self.id,
            "chatId": self.chat_id,
            "senderId": self.sender_id,
            "senderName": sender.name if sender else "Unknown User",
            "senderPhoto": sender.photo_url if sender else None,
            "text": DELETED_PLACEHOLDER if self.deleted else self.text,
            "fileId": self.file_id,
            "file": self.file.to_meta() if (self.file and not self.deleted) else None,
            "read": bool(self.read),
            "edited": bool(self.edited),
            "deleted": bool(self.deleted),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "timestamp": self.created_at,
        }


__all__ = ["Message", "DELETED_PLACEHOLDER"]
