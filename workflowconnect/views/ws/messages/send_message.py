from __future__ import annotations

import logging

from ....extensions import db, socketio
from ....helpers.ws import emit_to_sender
from ....models import Chat
from ...middleware import require_chat_member
from .common import clean_text, fan_out_message, persist_message


def register() -> None:
    @socketio.on("sendMessage")
    @require_chat_member
    def _on_send_message(chat: Chat, user_id: int, data: dict):
        text, error = clean_text(data)
        if error:
            return emit_to_sender("error", error)
        try:
            message = persist_message(chat, user_id, text)
        except Exception:
            logging.exception("sendMessage handler error (user=%s, chat=%s)", user_id, chat.id)
            db.session.rollback()
            return emit_to_sender("error", "Error sending message")

        delivered = fan_out_message(chat, message)
        logging.debug(
            "sendMessage: message %s in chat %s delivered to %s", message.id, chat.id, delivered
        )
