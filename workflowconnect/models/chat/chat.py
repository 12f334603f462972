# Enable postponed annotations to avoid runtime import issues and allow future-style typing
from __future__ import annotations

from typing import Optional, TYPE_CHECKING

from sqlalchemy import func, select
from sqlalchemy.orm import Mapped

from ...extensions import db
from ...lib.utils import now_ms
from .message import Message
from .participant import ChatParticipant

if TYPE_CHECKING:
    from ...models.auth.user import User


# A conversation between exactly two users (private) or any number of users (group)
class Chat(db.Model):
    # Surrogate primary key id
    id: Mapped[int] = db.Column(db.Integer, primary_key=True)
    # Display name; only group chats carry one
    name: Mapped[Optional[str]] = db.Column(db.String(255), nullable=True)
    # Group chats can gain and lose participants; private chats cannot
    is_group: Mapped[bool] = db.Column(db.Boolean, default=False, nullable=False)
    # Creator of a group chat; the only user allowed to delete it
    admin_id: Mapped[Optional[int]] = db.Column(
        db.Integer, db.ForeignKey("user.id"), nullable=True
    )
    # Epoch milliseconds
    created_at: Mapped[int] = db.Column(db.BigInteger, default=now_ms)
    updated_at: Mapped[int] = db.Column(db.BigInteger, default=now_ms, index=True)
    # Pointer to the newest visible message; kept in step with message writes
    last_message_id: Mapped[Optional[int]] = db.Column(db.Integer, nullable=True)
    last_message_at: Mapped[Optional[int]] = db.Column(db.BigInteger, nullable=True)

    # ORM relationship to participant links, removed together with the chat
    participants: Mapped[list["ChatParticipant"]] = db.relationship(
        "ChatParticipant", backref="chat", lazy=True, cascade="all, delete-orphan"
    )
    # ORM relationship to messages, removed together with the chat
    messages: Mapped[list["Message"]] = db.relationship(
        "Message",
        back_populates="chat",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="Message.created_at",
    )

    def is_participant(self, user_id: int) -> bool:
        return (
            db.session.query(ChatParticipant.id)
            .filter_by(chat_id=self.id, user_id=user_id)
            .first()
            is not None
        )

    def participant_ids(self) -> list[int]:
        rows = (
            db.session.query(ChatParticipant.user_id)
            .filter_by(chat_id=self.id)
            .all()
        )
        return [user_id for (user_id,) in rows]

    def participant_users(self) -> list["User"]:
        return [link.user for link in self.participants]

    def add_participant(self, user_id: int) -> bool:
        """Link ``user_id`` to this chat; returns False when already linked."""
        if self.is_participant(user_id):
            return False
        db.session.add(ChatParticipant(chat_id=self.id, user_id=user_id))
        return True

    def remove_participant(self, user_id: int) -> bool:
        removed = (
            db.session.query(ChatParticipant)
            .filter_by(chat_id=self.id, user_id=user_id)
            .delete(synchronize_session=False)
        )
        return bool(removed)

    def next_message_timestamp(self) -> int:
        """Creation time for a new message that never sorts before the current newest one."""
        return max(now_ms(), self.last_message_at or 0)

    def point_to(self, message: Optional["Message"]) -> None:
        """Move the last-message pointer; callers commit it with the message write."""
        self.last_message_id = message.id if message else None
        self.last_message_at = message.created_at if message else None
        self.updated_at = now_ms()

    def refresh_last_message(self) -> None:
        newest = (
            db.session.query(Message)
            .filter(Message.chat_id == self.id, Message.deleted.is_(False))
            .order_by(Message.created_at.desc(), Message.id.desc())
            .first()
        )
        self.point_to(newest)

    @staticmethod
    def for_user(user_id: int) -> list["Chat"]:
        return (
            db.session.query(Chat)
            .join(ChatParticipant, ChatParticipant.chat_id == Chat.id)
            .filter(ChatParticipant.user_id == user_id)
            .order_by(Chat.updated_at.desc(), Chat.id.desc())
            .all()
        )

    @staticmethod
    def find_private(user_a: int, user_b: int) -> Optional["Chat"]:
        """Existing two-person private chat between the pair, if any."""
        candidate_ids = (
            select(ChatParticipant.chat_id)
            .where(ChatParticipant.user_id.in_([user_a, user_b]))
            .group_by(ChatParticipant.chat_id)
            .having(func.count(ChatParticipant.user_id) == 2)
        )
        for chat in (
            db.session.query(Chat)
            .filter(Chat.id.in_(candidate_ids), Chat.is_group.is_(False))
            .all()
        ):
            if len(chat.participants) == 2:
                return chat
        return None

    def to_dict(self, include_participants: bool = True) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "isGroup": bool(self.is_group),
            "adminId": self.admin_id,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "lastMessageId": self.last_message_id,
            "lastMessageAt": self.last_message_at,
        }
        if include_participants:
            data["participants"] = [user.to_dict() for user in self.participant_users()]
            last = db.session.get(Message, self.last_message_id) if self.last_message_id else None
            data["lastMessage"] = last.to_dict() if last else None
        return data


__all__ = ["Chat"]
