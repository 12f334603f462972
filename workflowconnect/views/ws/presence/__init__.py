from .common import emit_presence, set_presence
from .connect import register as register_connect
from .disconnect import register as register_disconnect

__all__ = [
    "register_socket_handlers",
    "emit_presence",
    "set_presence",
]


def register_socket_handlers() -> None:
    register_connect()
    register_disconnect()
