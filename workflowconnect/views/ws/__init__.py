from .presence import register_socket_handlers as register_presence_handlers
from .messages import register_socket_handlers as register_message_handlers

__all__ = ["register_socket_handlers"]


def register_socket_handlers() -> None:
    register_presence_handlers()
    register_message_handlers()
