from __future__ import annotations

import logging

from ....extensions import db, socketio
from ....helpers.ws import emit_to_sender
from ....models import Message
from ...middleware import require_own_message
from .common import clean_text, edit_message


def register() -> None:
    @socketio.on("editMessage")
    @require_own_message("edit")
    def _on_edit_message(message: Message, user_id: int, data: dict):
        text, error = clean_text(data)
        if error:
            return emit_to_sender("error", error)
        try:
            edit_message(message, text)
        except Exception:
            logging.exception("editMessage handler error (user=%s, message=%s)", user_id, message.id)
            db.session.rollback()
            emit_to_sender("error", "Error editing message")
