from .participant import ChatParticipant
from .message import Message, DELETED_PLACEHOLDER
from .file import File
from .chat import Chat

__all__ = ['Chat', 'ChatParticipant', 'Message', 'File', 'DELETED_PLACEHOLDER']
