# Enable postponed annotations to avoid runtime import issues and allow future-style typing
from __future__ import annotations

# Import all models from their subdirectories so metadata is registered in one place
from .auth.user import User
from .chat.participant import ChatParticipant
from .chat.message import Message, DELETED_PLACEHOLDER
from .chat.file import File
from .chat.chat import Chat

__all__ = [
    "User",
    "Chat",
    "ChatParticipant",
    "Message",
    "File",
    "DELETED_PLACEHOLDER",
]
