from __future__ import annotations

import logging

from ....extensions import db, socketio
from ....helpers.ws import emit_to_sender
from ....models import Message
from ...middleware import require_own_message
from .common import soft_delete_message


def register() -> None:
    @socketio.on("deleteMessage")
    @require_own_message("delete")
    def _on_delete_message(message: Message, user_id: int, data: dict):
        try:
            soft_delete_message(message)
        except Exception:
            logging.exception("deleteMessage handler error (user=%s, message=%s)", user_id, message.id)
            db.session.rollback()
            emit_to_sender("error", "Error deleting message")
