from .common import fan_out, fan_out_message, persist_message
from .send_message import register as register_send_message
from .send_file import register as register_send_file
from .edit_message import register as register_edit_message
from .delete_message import register as register_delete_message

__all__ = [
    "register_socket_handlers",
    "fan_out",
    "fan_out_message",
    "persist_message",
]


def register_socket_handlers() -> None:
    register_send_message()
    register_send_file()
    register_edit_message()
    register_delete_message()
